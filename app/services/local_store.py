"""
Local key/value persistence for the studio.

Three independent JSON documents live under fixed keys: the active session
user, the user directory and the project collection. Every write replaces a
whole document; there is no field-level update at this boundary. Anything
that changes one project must rebuild the entire collection before saving it,
which ``LocalStore.update_project`` does for callers that want a single-record
read-modify-write.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from pydantic import ValidationError

from app.core.entities import Project, User
from app.core.exceptions import EntityNotFoundError
from app.core.metrics import record_corrupt_read, record_store_write
from app.db.models import StoredDocument
from app.db.session import session_scope

logger = logging.getLogger(__name__)


class DocumentBackend(Protocol):
    """Synchronous string store addressed by key."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class SqlDocumentBackend:
    """Stores each document as one row of ``stored_documents``."""

    def read(self, key: str) -> str | None:
        with session_scope() as db:
            row = db.get(StoredDocument, key)
            return row.value if row is not None else None

    def write(self, key: str, value: str) -> None:
        with session_scope() as db:
            row = db.get(StoredDocument, key)
            if row is None:
                db.add(StoredDocument(key=key, value=value))
            else:
                row.value = value

    def delete(self, key: str) -> None:
        with session_scope() as db:
            row = db.get(StoredDocument, key)
            if row is not None:
                db.delete(row)


@dataclass(frozen=True)
class StoreKeys:
    session: str = "hakawati_user"
    users: str = "hakawati_users_db"
    projects: str = "hakawati_projects"


class LocalStore:
    def __init__(self, backend: DocumentBackend, keys: StoreKeys | None = None):
        self.backend = backend
        self.keys = keys or StoreKeys()

    def _read_json(self, key: str):
        raw = self.backend.read(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("store.corrupt_document", extra={"key": key})
            record_corrupt_read(key)
            return None

    def _write_json(self, key: str, value) -> None:
        self.backend.write(key, json.dumps(value, ensure_ascii=False))
        record_store_write(key)

    def _read_list(self, key: str, model):
        data = self._read_json(key)
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning(
                "store.invalid_document",
                extra={"key": key, "error": f"expected a list, got {type(data).__name__}"},
            )
            record_corrupt_read(key)
            return []
        items = []
        for index, item in enumerate(data):
            # Invalid records are skipped one by one; the rest stay loadable.
            try:
                items.append(model.model_validate(item))
            except ValidationError as exc:
                logger.warning("store.invalid_record", extra={"key": key, "index": index, "error": str(exc)})
                record_corrupt_read(key)
        return items

    # -- session --------------------------------------------------------

    def load_session(self) -> User | None:
        data = self._read_json(self.keys.session)
        if data is None:
            return None
        try:
            return User.model_validate(data)
        except ValidationError as exc:
            logger.warning("store.invalid_document", extra={"key": self.keys.session, "error": str(exc)})
            record_corrupt_read(self.keys.session)
            return None

    def save_session(self, user: User) -> None:
        self._write_json(self.keys.session, user.to_document())

    def clear_session(self) -> None:
        self.backend.delete(self.keys.session)

    # -- users ----------------------------------------------------------

    def load_user_directory(self) -> list[User]:
        return self._read_list(self.keys.users, User)

    def save_user_directory(self, users: Sequence[User]) -> None:
        self._write_json(self.keys.users, [u.to_document() for u in users])

    # -- projects -------------------------------------------------------

    def load_projects(self) -> list[Project]:
        return self._read_list(self.keys.projects, Project)

    def save_projects(self, projects: Sequence[Project]) -> None:
        self._write_json(self.keys.projects, [p.to_document() for p in projects])

    def update_project(self, project_id: str, mutate: Callable[[Project], Project]) -> list[Project]:
        """Replace one project through ``mutate`` and rewrite the whole collection."""
        projects = self.load_projects()
        found = False
        updated: list[Project] = []
        for project in projects:
            if project.id == project_id:
                found = True
                project = mutate(project)
            updated.append(project)
        if not found:
            raise EntityNotFoundError("Project", project_id)
        self.save_projects(updated)
        return updated
