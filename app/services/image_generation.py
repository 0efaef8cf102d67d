"""Single scene / single character image generation.

Both operations raise the entity's loading flag before calling the generator
and lower it on every exit path. A failure leaves any earlier image and
prompt in place and queues a notice; it is never re-raised, so a batch run can
move on to the next scene.
"""

from __future__ import annotations

import logging

from app.core.catalogues import PORTRAIT_ASPECT_RATIO
from app.core.exceptions import EntityNotFoundError
from app.core.request_context import log_context
from app.services.content_generator import ContentGenerator, construct_scene_prompt
from app.services.studio import StudioSession

logger = logging.getLogger(__name__)

SCENE_FAILURE_NOTICE = "فشل توليد الصورة للمشهد."
CHARACTER_FAILURE_NOTICE = "فشل إعادة توليد الشخصية"


async def generate_scene_image(session: StudioSession, generator: ContentGenerator, scene_id: str) -> bool:
    """Render one scene; returns True when a new image was stored."""
    try:
        scene = session.get_scene(scene_id)
    except EntityNotFoundError:
        return False

    with log_context(project_id=session.current_project_id, scene_id=scene_id):
        session.replace_scene(scene_id, is_loading_image=True)
        try:
            prompt = construct_scene_prompt(scene.text, session.characters, session.config.style)
            image_url = await generator.generate_image(prompt, session.config.aspect_ratio, False)
        except Exception as exc:  # noqa: BLE001
            session.replace_scene(scene_id, is_loading_image=False)
            session.notify(SCENE_FAILURE_NOTICE)
            logger.warning("scene_image.failed", extra={"error": str(exc)})
            return False
        except BaseException:
            session.replace_scene(scene_id, is_loading_image=False)
            raise

        session.replace_scene(scene_id, image_url=image_url, image_prompt=prompt, is_loading_image=False)
        session.persist_current_project()
        logger.info("scene_image.generated")
        return True


async def regenerate_character(session: StudioSession, generator: ContentGenerator, character_id: str) -> bool:
    """Render a fresh character-sheet portrait; returns True on success."""
    try:
        character = session.get_character(character_id)
    except EntityNotFoundError:
        return False

    with log_context(project_id=session.current_project_id):
        session.replace_character(character_id, is_loading=True)
        try:
            avatar_url = await generator.generate_image(character.visual_prompt, PORTRAIT_ASPECT_RATIO, True)
        except Exception as exc:  # noqa: BLE001
            session.replace_character(character_id, is_loading=False)
            session.notify(CHARACTER_FAILURE_NOTICE)
            logger.warning("character_image.failed", extra={"character_id": character_id, "error": str(exc)})
            return False
        except BaseException:
            session.replace_character(character_id, is_loading=False)
            raise

        session.replace_character(character_id, avatar_url=avatar_url, is_loading=False)
        session.persist_current_project()
        logger.info("character_image.generated", extra={"character_id": character_id})
        return True
