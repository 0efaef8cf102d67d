"""
In-memory working state of the studio: the signed-in user, the project
collection and the currently open project.

Nothing here is saved implicitly. Callers make a change durable by calling
``persist_current_project`` right away, on the next loop tick via
``schedule_persist``, or when a free-text edit is committed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from app.core.catalogues import (
    NEW_CHARACTER_DESCRIPTION,
    NEW_CHARACTER_NAME,
    NEW_CHARACTER_VISUAL_PROMPT,
    NEW_GENERATED_PROJECT_TITLE,
    NEW_MANUAL_PROJECT_TITLE,
    NEW_SCENE_TEXT,
    SUPPORTED_ASPECT_RATIOS,
)
from app.core.entities import AppStep, Character, Project, ProjectConfig, Scene, User
from app.core.exceptions import EntityNotFoundError, InputValidationError, NotAuthenticatedError
from app.core.request_context import log_context
from app.services import identity
from app.services.local_store import LocalStore

logger = logging.getLogger(__name__)

_CONFIG_FIELDS = {"title", "style", "genre", "aspect_ratio", "scene_count", "story_text_raw"}


@dataclass
class Notice:
    level: str
    message: str


def _now_ms() -> int:
    return int(time.time() * 1000)


class StudioSession:
    def __init__(self, store: LocalStore, avatar_template: str = identity.DEFAULT_AVATAR_TEMPLATE):
        self.store = store
        self.avatar_template = avatar_template
        self.user: User | None = None
        self.projects: list[Project] = []
        self.current_project_id: str | None = None
        self.config = ProjectConfig()
        self.characters: list[Character] = []
        self.scenes: list[Scene] = []
        self.step = AppStep.AUTH
        self.notices: list[Notice] = []
        self._last_updated_at = 0

    @classmethod
    def restore(cls, store: LocalStore, **kwargs) -> "StudioSession":
        """Build a session from whatever the store holds (startup path)."""
        session = cls(store, **kwargs)
        session.user = store.load_session()
        if session.user is not None:
            session.step = AppStep.SETUP
        session.projects = store.load_projects()
        session._last_updated_at = max((p.updated_at for p in session.projects), default=0)
        return session

    # -- notices --------------------------------------------------------

    def notify(self, message: str, level: str = "error") -> None:
        self.notices.append(Notice(level=level, message=message))

    def drain_notices(self) -> list[Notice]:
        notices, self.notices = self.notices, []
        return notices

    # -- identity -------------------------------------------------------

    def login(self, name: str, email: str = "") -> User:
        try:
            user = identity.login(self.store, name, email, avatar_template=self.avatar_template)
        except InputValidationError as exc:
            self.notify(exc.detail, level="warning")
            raise
        self._close_project()
        self.user = user
        self.step = AppStep.SETUP
        return user

    def logout(self) -> None:
        identity.logout(self.store)
        self._close_project()
        self.user = None
        self.step = AppStep.AUTH

    def _close_project(self) -> None:
        self.current_project_id = None
        self.config = ProjectConfig()
        self.characters = []
        self.scenes = []

    def require_user(self) -> User:
        if self.user is None:
            raise NotAuthenticatedError()
        return self.user

    # -- projects -------------------------------------------------------

    @property
    def current_project(self) -> Project | None:
        if self.current_project_id is None:
            return None
        return next((p for p in self.projects if p.id == self.current_project_id), None)

    def require_project(self) -> Project:
        project = self.current_project
        if project is None:
            raise EntityNotFoundError("Project", self.current_project_id or "current")
        return project

    def _next_updated_at(self) -> int:
        self._last_updated_at = max(_now_ms(), self._last_updated_at + 1)
        return self._last_updated_at

    def _save_projects(self, projects: list[Project]) -> None:
        self.projects = projects
        self.store.save_projects(projects)

    def create_project(self, manual: bool = False) -> Project:
        user = self.require_user()
        title = NEW_MANUAL_PROJECT_TITLE if manual else NEW_GENERATED_PROJECT_TITLE
        config = self.config.model_copy(update={"story_text_raw": "", "title": title})
        project = Project(
            user_id=user.id,
            title=title,
            config=config,
            updated_at=self._next_updated_at(),
        )
        self._save_projects([project, *self.projects])
        self.current_project_id = project.id
        self.config = config.model_copy()
        self.characters = []
        self.scenes = []
        self.step = AppStep.STORY_PREVIEW if manual else AppStep.IDEA_GENERATOR
        logger.info("project.created", extra={"project_id": project.id, "manual": manual})
        return project

    def persist_current_project(self) -> Project | None:
        if self.current_project_id is None or self.user is None:
            return None
        updated_at = self._next_updated_at()
        saved: Project | None = None
        projects: list[Project] = []
        for project in self.projects:
            if project.id == self.current_project_id:
                project = project.model_copy(
                    update={
                        "title": self.config.title,
                        "config": self.config.model_copy(deep=True),
                        "characters": [c.model_copy() for c in self.characters],
                        "scenes": [s.model_copy() for s in self.scenes],
                        "updated_at": updated_at,
                    }
                )
                saved = project
            projects.append(project)
        self._save_projects(projects)
        with log_context(project_id=self.current_project_id):
            logger.debug("project.persisted")
        return saved

    def schedule_persist(self) -> None:
        """Persist on the next event-loop tick so in-flight state updates land first."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.persist_current_project()
            return
        loop.call_soon(self.persist_current_project)

    def _owned_project(self, project_id: str) -> Project:
        """Look up one of the signed-in user's projects; other users' ids read as missing."""
        user = self.require_user()
        project = next((p for p in self.projects if p.id == project_id), None)
        if project is None or project.user_id != user.id:
            raise EntityNotFoundError("Project", project_id)
        return project

    def load_project(self, project_id: str) -> Project:
        project = self._owned_project(project_id)
        self.current_project_id = project.id
        self.config = project.config.model_copy(deep=True)
        # Loading flags are never meaningful across a reload.
        self.characters = [c.model_copy(update={"is_loading": False}) for c in project.characters]
        self.scenes = [s.model_copy(update={"is_loading_image": False}) for s in project.scenes]
        self.step = AppStep.INPUT_STORY
        return project

    def delete_project(self, project_id: str, confirmed: bool = False) -> bool:
        self._owned_project(project_id)
        if not confirmed:
            return False
        self._save_projects([p for p in self.projects if p.id != project_id])
        if self.current_project_id == project_id:
            self.current_project_id = None
            self.step = AppStep.SETUP
        logger.info("project.deleted", extra={"project_id": project_id})
        return True

    def gallery(self) -> list[Project]:
        user = self.require_user()
        own = [p for p in self.projects if p.user_id == user.id]
        return sorted(own, key=lambda p: p.updated_at, reverse=True)

    # -- editing --------------------------------------------------------

    def update_config(self, **fields) -> ProjectConfig:
        unknown = set(fields) - _CONFIG_FIELDS
        if unknown:
            raise InputValidationError(f"unknown config fields: {sorted(unknown)}")
        ratio = fields.get("aspect_ratio")
        if ratio is not None and ratio not in SUPPORTED_ASPECT_RATIOS:
            raise InputValidationError(f"unsupported aspect ratio: {ratio}")
        self.config = self.config.model_copy(update=fields)
        return self.config

    def get_character(self, character_id: str) -> Character:
        for character in self.characters:
            if character.id == character_id:
                return character
        raise EntityNotFoundError("Character", character_id)

    def get_scene(self, scene_id: str) -> Scene:
        for scene in self.scenes:
            if scene.id == scene_id:
                return scene
        raise EntityNotFoundError("Scene", scene_id)

    def replace_character(self, character_id: str, **changes) -> Character | None:
        updated: Character | None = None
        characters: list[Character] = []
        for character in self.characters:
            if character.id == character_id:
                character = character.model_copy(update=changes)
                updated = character
            characters.append(character)
        self.characters = characters
        return updated

    def replace_scene(self, scene_id: str, **changes) -> Scene | None:
        updated: Scene | None = None
        scenes: list[Scene] = []
        for scene in self.scenes:
            if scene.id == scene_id:
                scene = scene.model_copy(update=changes)
                updated = scene
            scenes.append(scene)
        self.scenes = scenes
        return updated

    def add_character(self) -> Character:
        character = Character(
            name=NEW_CHARACTER_NAME,
            description=NEW_CHARACTER_DESCRIPTION,
            visual_prompt=NEW_CHARACTER_VISUAL_PROMPT,
        )
        self.characters = [*self.characters, character]
        return character

    def add_scene(self) -> Scene:
        scene = Scene(text=NEW_SCENE_TEXT)
        self.scenes = [*self.scenes, scene]
        return scene

    def update_scene_text(self, scene_id: str, text: str) -> Scene:
        self.get_scene(scene_id)
        return self.replace_scene(scene_id, text=text)

    def set_character_avatar(self, character_id: str, avatar_url: str) -> Character:
        self.get_character(character_id)
        character = self.replace_character(character_id, avatar_url=avatar_url)
        self.persist_current_project()
        return character
