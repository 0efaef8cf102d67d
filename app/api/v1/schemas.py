from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.entities import AppStep, Character, Project, ProjectConfig, Scene, User


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(CamelModel):
    name: str
    email: str = ""


class SessionRead(CamelModel):
    user: User | None = None
    step: AppStep
    current_project_id: str | None = None


class ProjectCreate(CamelModel):
    manual: bool = False


class GalleryItemRead(CamelModel):
    id: str
    title: str
    updated_at: int
    cover_url: str | None = None
    character_count: int
    scene_count: int

    @classmethod
    def from_project(cls, project: Project) -> "GalleryItemRead":
        return cls(
            id=project.id,
            title=project.title,
            updated_at=project.updated_at,
            cover_url=project.cover_url(),
            character_count=len(project.characters),
            scene_count=len(project.scenes),
        )


class WorkspaceRead(CamelModel):
    project_id: str | None
    step: AppStep
    config: ProjectConfig
    characters: list[Character]
    scenes: list[Scene]
    batch_running: bool = False


class ConfigUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1)
    style: str | None = None
    genre: str | None = None
    aspect_ratio: str | None = None
    scene_count: int | None = Field(default=None, ge=1)
    story_text_raw: str | None = None


class IdeaRequest(CamelModel):
    idea: str


class StoryDraftRead(CamelModel):
    title: str | None = None
    story: str


class SceneUpdate(CamelModel):
    text: str


class GenerationResult(CamelModel):
    ok: bool
    notices: list[str] = Field(default_factory=list)


class BatchStatusRead(CamelModel):
    running: bool


class NoticeRead(CamelModel):
    level: str
    message: str


class AnimationPromptRead(CamelModel):
    scene_id: str
    index: int
    image_url: str
    image_prompt: str | None = None


class AspectRatioOption(CamelModel):
    label: str
    value: str


class CataloguesRead(CamelModel):
    art_styles: list[str]
    genres: list[str]
    writing_styles: list[str]
    story_lengths: list[str]
    aspect_ratios: list[AspectRatioOption]
