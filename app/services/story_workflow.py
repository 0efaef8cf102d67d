from __future__ import annotations

import asyncio
import logging

from app.core.catalogues import PORTRAIT_ASPECT_RATIO, STORY_LENGTHS
from app.core.entities import AppStep, Character, StoryDraft
from app.core.exceptions import GenerationError, InputValidationError
from app.core.request_context import log_context
from app.services.content_generator import ContentGenerator
from app.services.studio import StudioSession

logger = logging.getLogger(__name__)

EMPTY_IDEA_NOTICE = "يرجى إدخال فكرة أولاً."
EMPTY_STORY_NOTICE = "يرجى كتابة نص القصة أولاً."
IDEA_FAILURE_NOTICE = "عذراً، حدث خطأ أثناء توليد القصة. تأكد من إعداد مفتاح API بشكل صحيح."
ANALYSIS_FAILURE_NOTICE = "فشل تحليل القصة."


async def generate_story_from_idea(session: StudioSession, generator: ContentGenerator, idea: str) -> StoryDraft:
    """Expand an idea into story text and move to the preview step."""
    if not idea or not idea.strip():
        session.notify(EMPTY_IDEA_NOTICE, level="warning")
        raise InputValidationError("idea text is required", detail=EMPTY_IDEA_NOTICE)

    config = session.config
    try:
        draft = await generator.expand_idea_to_story(idea, config.genre, config.style, STORY_LENGTHS[1])
        if not draft.story or not draft.story.strip():
            raise GenerationError("model returned no story text")
    except Exception as exc:
        logger.exception("story.idea_failed")
        session.notify(IDEA_FAILURE_NOTICE)
        raise GenerationError(f"idea expansion failed: {exc}", detail=IDEA_FAILURE_NOTICE) from exc

    session.update_config(story_text_raw=draft.story, title=draft.title or session.config.title)
    session.step = AppStep.STORY_PREVIEW
    return draft


async def _with_portrait(generator: ContentGenerator, character: Character) -> Character:
    try:
        avatar_url = await generator.generate_image(character.visual_prompt, PORTRAIT_ASPECT_RATIO, True)
    except Exception as exc:  # noqa: BLE001
        logger.warning("story.portrait_failed", extra={"character": character.name, "error": str(exc)})
        return character
    return character.model_copy(update={"avatar_url": avatar_url})


async def analyze_story(session: StudioSession, generator: ContentGenerator) -> StudioSession:
    """Extract characters and scenes from the story text, then draw every portrait."""
    story_text = session.config.story_text_raw
    if not story_text or not story_text.strip():
        session.notify(EMPTY_STORY_NOTICE, level="warning")
        raise InputValidationError("story text is required", detail=EMPTY_STORY_NOTICE)

    with log_context(project_id=session.current_project_id):
        try:
            extracted, scenes = await asyncio.gather(
                generator.analyze_story_and_extract_characters(story_text, session.config.style),
                generator.breakdown_story_into_scenes(story_text),
            )
        except Exception as exc:
            logger.exception("story.analysis_failed")
            session.notify(ANALYSIS_FAILURE_NOTICE)
            raise GenerationError(f"story analysis failed: {exc}", detail=ANALYSIS_FAILURE_NOTICE) from exc

        session.scenes = list(scenes)
        session.characters = list(await asyncio.gather(*(_with_portrait(generator, c) for c in extracted)))
        session.step = AppStep.INPUT_STORY
        session.persist_current_project()
        logger.info(
            "story.analyzed",
            extra={"character_count": len(session.characters), "scene_count": len(session.scenes)},
        )
    return session
