"""Fixed option lists offered by the studio for new projects."""

ART_STYLES = [
    "Epic Cinematic Anime (Mappa Style)",
    "Ghibli Soft Touch",
    "Cyberpunk Anime 2077",
    "Dark Fantasy Illustration",
    "Vintage 90s Anime",
]

GENRES = [
    "مغامرة ملحمية (Epic Adventure)",
    "خيال مظلم (Dark Fantasy)",
    "خيال علمي (Sci-Fi)",
    "دراما إنسانية (Seinen Drama)",
    "أساطير شعبية (Folklore)",
]

WRITING_STYLES = [
    "سرد سينمائي (Cinematic Narrative)",
    "أسلوب الروايات المصورة (Manga Style)",
    "شاعري وعاطفي (Poetic)",
    "حوارات كثيفة (Dialogue Heavy)",
]

STORY_LENGTHS = [
    "قصيرة (Short - 3 scenes)",
    "متوسطة (Medium - 6 scenes)",
    "ملحمية (Epic - 10+ scenes)",
]

ASPECT_RATIOS = [
    {"label": "أفقي سينمائي (16:9)", "value": "16:9"},
    {"label": "رأسي جوال (9:16)", "value": "9:16"},
    {"label": "مربع (1:1)", "value": "1:1"},
]

# Portraits always use 3:4; it is not offered for scenes.
PORTRAIT_ASPECT_RATIO = "3:4"
SUPPORTED_ASPECT_RATIOS = frozenset({"16:9", "9:16", "1:1", PORTRAIT_ASPECT_RATIO})

DEFAULT_PROJECT_TITLE = "قصة غير معنونة"
NEW_MANUAL_PROJECT_TITLE = "قصة يدوية جديدة"
NEW_GENERATED_PROJECT_TITLE = "مغامرة جديدة"
DEFAULT_SCENE_COUNT = 5

NEW_CHARACTER_NAME = "شخصية جديدة"
NEW_CHARACTER_DESCRIPTION = "وصف الشخصية..."
NEW_CHARACTER_VISUAL_PROMPT = "Character description"
NEW_SCENE_TEXT = "أدخل وصف المشهد الإضافي..."
