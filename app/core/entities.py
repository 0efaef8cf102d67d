"""
Stored document shapes for users and storyboard projects.

Field names are serialized in camelCase so the persisted JSON keeps the layout
of the browser build (``visualPrompt``, ``imageUrl``, ``updatedAt`` ...).
Optional fields are omitted from stored JSON when absent.
"""

from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.catalogues import ART_STYLES, DEFAULT_PROJECT_TITLE, DEFAULT_SCENE_COUNT, GENRES


def new_id() -> str:
    return str(uuid.uuid4())


class Document(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class AppStep(str, Enum):
    """Screens of the studio wizard."""

    AUTH = "AUTH"
    SETUP = "SETUP"
    IDEA_GENERATOR = "IDEA_GENERATOR"
    STORY_PREVIEW = "STORY_PREVIEW"
    INPUT_STORY = "INPUT_STORY"
    GALLERY = "GALLERY"


class User(Document):
    id: str
    name: str
    email: str = ""
    avatar: str | None = None


class Character(Document):
    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    visual_prompt: str = ""
    avatar_url: str | None = None
    is_loading: bool = False


class Scene(Document):
    id: str = Field(default_factory=new_id)
    text: str
    image_url: str | None = None
    image_prompt: str | None = None
    is_loading_image: bool = False


class ProjectConfig(Document):
    title: str = DEFAULT_PROJECT_TITLE
    style: str = ART_STYLES[0]
    genre: str = GENRES[0]
    aspect_ratio: str = "16:9"
    scene_count: int = DEFAULT_SCENE_COUNT
    story_text_raw: str = ""


class Project(Document):
    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    config: ProjectConfig = Field(default_factory=ProjectConfig)
    characters: list[Character] = Field(default_factory=list)
    scenes: list[Scene] = Field(default_factory=list)
    updated_at: int = 0

    def cover_url(self) -> str | None:
        for scene in self.scenes:
            if scene.image_url:
                return scene.image_url
        if self.characters and self.characters[0].avatar_url:
            return self.characters[0].avatar_url
        return None


class StoryDraft(BaseModel):
    """Result of expanding an idea into prose."""

    title: str | None = None
    story: str = ""
