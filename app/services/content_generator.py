"""
Boundary to the generative-AI service.

``ContentGenerator`` is what the studio depends on; ``GeminiContentGenerator``
is the production implementation. Gemini SDK calls block, so each one runs in
a worker thread and the event loop only suspends at these calls. Every
failure, whatever its cause, surfaces as ``GenerationError``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, Sequence

from app.core.catalogues import SUPPORTED_ASPECT_RATIOS
from app.core.entities import Character, Scene, StoryDraft
from app.core.exceptions import GenerationError
from app.prompts.loader import render_prompt
from app.services.json_parser import parse_json_response
from app.services.storage import LocalMediaStore
from app.services.vertex_gemini import GeminiClient, GeminiError

logger = logging.getLogger(__name__)


class ContentGenerator(Protocol):
    async def generate_image(self, prompt: str, aspect_ratio: str, is_character_sheet: bool) -> str: ...

    async def expand_idea_to_story(self, idea: str, genre: str, style: str, length_hint: str) -> StoryDraft: ...

    async def analyze_story_and_extract_characters(self, story_text: str, style: str) -> list[Character]: ...

    async def breakdown_story_into_scenes(self, story_text: str) -> list[Scene]: ...


def construct_scene_prompt(scene_text: str, characters: Sequence[Character], style: str) -> str:
    """Image prompt for one scene, carrying the whole cast for visual consistency."""
    return render_prompt(
        "prompt_scene_image",
        scene_text=scene_text,
        characters=list(characters),
        style=style,
    )


class GeminiContentGenerator:
    def __init__(self, gemini: GeminiClient, media_store: LocalMediaStore):
        self.gemini = gemini
        self.media_store = media_store

    async def _text(self, prompt: str, operation: str) -> dict | list:
        try:
            raw = await asyncio.to_thread(self.gemini.generate_text, prompt, True)
        except (GeminiError, RuntimeError) as exc:
            raise GenerationError(f"{operation} failed: {exc}") from exc
        parsed = parse_json_response(raw, operation)
        if parsed is None:
            raise GenerationError(f"{operation} returned unparseable output")
        return parsed

    async def generate_image(self, prompt: str, aspect_ratio: str, is_character_sheet: bool = False) -> str:
        if aspect_ratio not in SUPPORTED_ASPECT_RATIOS:
            raise GenerationError(f"unsupported aspect ratio: {aspect_ratio}")
        if is_character_sheet:
            prompt = render_prompt("prompt_character_sheet", prompt=prompt)
        try:
            image_bytes, mime_type = await asyncio.to_thread(self.gemini.generate_image, prompt, aspect_ratio)
        except (GeminiError, RuntimeError) as exc:
            raise GenerationError(f"image generation failed: {exc}") from exc
        url = await asyncio.to_thread(self.media_store.save_image_bytes, image_bytes, mime_type)
        logger.info("generator.image_saved", extra={"url": url, "character_sheet": is_character_sheet})
        return url

    async def expand_idea_to_story(self, idea: str, genre: str, style: str, length_hint: str) -> StoryDraft:
        data = await self._text(
            render_prompt("prompt_expand_idea", idea=idea, genre=genre, style=style, length_hint=length_hint),
            "expand_idea",
        )
        if not isinstance(data, dict):
            raise GenerationError("expand_idea returned no story object")
        draft = StoryDraft(title=data.get("title") or None, story=str(data.get("story") or ""))
        if not draft.story.strip():
            raise GenerationError("expand_idea returned no story text")
        return draft

    async def analyze_story_and_extract_characters(self, story_text: str, style: str) -> list[Character]:
        data = await self._text(
            render_prompt("prompt_extract_characters", story_text=story_text, style=style),
            "extract_characters",
        )
        if isinstance(data, dict):
            data = data.get("characters", [])
        characters: list[Character] = []
        for item in data if isinstance(data, list) else []:
            if not isinstance(item, dict) or not item.get("name"):
                continue
            characters.append(
                Character(
                    name=str(item["name"]),
                    description=str(item.get("description") or ""),
                    visual_prompt=str(item.get("visualPrompt") or item.get("visual_prompt") or ""),
                )
            )
        return characters

    async def breakdown_story_into_scenes(self, story_text: str) -> list[Scene]:
        data = await self._text(
            render_prompt("prompt_breakdown_scenes", story_text=story_text),
            "breakdown_scenes",
        )
        if isinstance(data, dict):
            data = data.get("scenes", [])
        scenes: list[Scene] = []
        for item in data if isinstance(data, list) else []:
            text = item.get("text") if isinstance(item, dict) else item
            if isinstance(text, str) and text.strip():
                scenes.append(Scene(text=text.strip()))
        return scenes
