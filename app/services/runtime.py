from __future__ import annotations

import logging

from app.core.gemini_factory import GeminiNotConfiguredError, build_gemini_client
from app.core.settings import Settings
from app.services.batch_images import BatchImageController
from app.services.content_generator import ContentGenerator, GeminiContentGenerator
from app.services.local_store import LocalStore, SqlDocumentBackend, StoreKeys
from app.services.storage import LocalMediaStore
from app.services.studio import StudioSession

logger = logging.getLogger(__name__)


class StudioRuntime:
    """Process-wide studio objects shared by the API routes."""

    def __init__(
        self,
        session: StudioSession,
        media_store: LocalMediaStore,
        generator: ContentGenerator | None = None,
    ):
        self.session = session
        self.media_store = media_store
        self.generator = generator
        self._batch: BatchImageController | None = None

    def require_generator(self) -> ContentGenerator:
        if self.generator is None:
            raise GeminiNotConfiguredError()
        return self.generator

    @property
    def batch(self) -> BatchImageController:
        if self._batch is None:
            self._batch = BatchImageController(self.session, self.require_generator())
        return self._batch

    @property
    def batch_running(self) -> bool:
        return self._batch is not None and self._batch.running

    async def shutdown(self) -> None:
        if self._batch is not None:
            await self._batch.shutdown()


def build_runtime(settings: Settings, generator: ContentGenerator | None = None) -> StudioRuntime:
    store = LocalStore(
        SqlDocumentBackend(),
        StoreKeys(session=settings.session_key, users=settings.users_key, projects=settings.projects_key),
    )
    session = StudioSession.restore(store, avatar_template=settings.avatar_url_template)
    media_store = LocalMediaStore(root_dir=settings.media_root, url_prefix=settings.media_url_prefix)
    if generator is None:
        try:
            generator = GeminiContentGenerator(build_gemini_client(settings), media_store)
        except GeminiNotConfiguredError:
            logger.warning("gemini_not_configured; generation endpoints will return 503")
    return StudioRuntime(session, media_store, generator)
