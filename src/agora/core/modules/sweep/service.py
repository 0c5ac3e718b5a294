import asyncio
import contextlib

import structlog

from agora.core.core import Service
from agora.core.modules.action.timing import compute_time_margin
from agora.core.modules.session.models import Session
from agora.utils import now

logger = structlog.get_logger(__name__)


class SweepService(Service):
    """Periodically recomputes the time margin of every action in open sessions."""

    _task: asyncio.Task[None] | None = None

    async def on_start(self) -> None:
        if self.core.config.sweep_enabled:
            self.start()

    async def on_stop(self) -> None:
        await self.stop()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run_forever(), name="time-margin-sweep")
        logger.debug("sweep_started", interval=self.core.config.sweep_interval_seconds)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("sweep_stopped")

    async def run_tick(self) -> int:
        """Recompute margins for all open sessions with actions; return how many were updated.

        A failure to list sessions propagates. A failure on one session is
        logged and the remaining sessions are still processed.
        """
        sessions = await self.store.find_open_with_actions()
        updated = 0
        for session in sessions:
            try:
                if await self._update_session(session):
                    updated += 1
            except Exception:
                logger.exception("sweep_session_failed", code=session.code)
        logger.debug("sweep_tick_completed", sessions=len(sessions), updated=updated)
        return updated

    async def _update_session(self, session: Session) -> bool:
        current = now()
        actions = [
            action.model_copy(update={"time_margin": compute_time_margin(action.start_time, current)})
            for action in session.actions
        ]
        result = await self.store.replace_actions(session.code, actions, session.version)
        if result is None:
            # Written or ended concurrently; the next tick sees the new version
            logger.debug("sweep_session_skipped", code=session.code)
            return False
        return True

    async def _run_forever(self) -> None:
        interval = self.core.config.sweep_interval_seconds
        while True:
            try:
                await self.run_tick()
            except Exception:
                logger.exception("sweep_tick_failed")
            await asyncio.sleep(interval)
