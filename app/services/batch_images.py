"""
Sequential "generate every missing scene image" runs.

One run walks the scene list as it was when the run started and renders each
scene that has no image yet, one generator call at a time. Stopping is
cooperative: the run's token is checked between scenes only, so a scene that is
already rendering finishes and persists its own result while the remaining
scenes are left untouched.
"""

from __future__ import annotations

import asyncio
import logging

from app.core.metrics import record_batch_scene
from app.core.request_context import log_context
from app.services.content_generator import ContentGenerator
from app.services.image_generation import generate_scene_image
from app.services.studio import StudioSession

logger = logging.getLogger(__name__)


def _log_run_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("batch.run_failed", exc_info=exc)


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class BatchImageController:
    def __init__(self, session: StudioSession, generator: ContentGenerator):
        self.session = session
        self.generator = generator
        self.running = False
        self._token: CancellationToken | None = None
        self._task: asyncio.Task | None = None

    def toggle(self) -> bool:
        """Start a run, or stop the current one. Returns the new ``running`` value."""
        if self.running:
            self.stop()
        else:
            self.start()
        return self.running

    def start(self) -> asyncio.Task | None:
        if self.running:
            return self._task
        token = CancellationToken()
        self.running = True
        self._token = token
        previous = self._task
        self._task = asyncio.create_task(self._run_after(previous, token))
        self._task.add_done_callback(_log_run_failure)
        return self._task

    def stop(self) -> None:
        if self._token is not None:
            self._token.cancel()
        self.running = False

    async def wait(self) -> None:
        """Wait for the latest run, including an in-flight scene after ``stop``."""
        if self._task is not None:
            await self._task

    async def shutdown(self) -> None:
        self.stop()
        await self.wait()

    async def _run_after(self, previous: asyncio.Task | None, token: CancellationToken) -> None:
        # A stopped run may still be finishing its in-flight scene.
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        await self.run(token)

    async def run(self, token: CancellationToken) -> dict[str, int]:
        """Walk the scenes once; the caller owns ``token``."""
        if self._token is None:
            self._token = token
            self.running = True
        scenes = list(self.session.scenes)
        summary = {"generated": 0, "failed": 0, "skipped": 0}
        try:
            with log_context(project_id=self.session.current_project_id):
                logger.info("batch.started", extra={"scene_count": len(scenes)})
                for scene in scenes:
                    if token.cancelled:
                        logger.info("batch.stopped", extra=summary)
                        break
                    if scene.image_url:
                        summary["skipped"] += 1
                        record_batch_scene("skipped")
                        continue
                    ok = await generate_scene_image(self.session, self.generator, scene.id)
                    outcome = "generated" if ok else "failed"
                    summary[outcome] += 1
                    record_batch_scene(outcome)
                else:
                    logger.info("batch.completed", extra=summary)
        finally:
            if self._token is token:
                self.running = False
                self._token = None
        return summary
