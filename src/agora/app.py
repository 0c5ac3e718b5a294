from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

from agora.config import Config
from agora.core.core import Core
from agora.core.modules.action.models import ActionTiming, Comment, Question
from agora.core.modules.session.models import Session, SessionOverview
from agora.core.modules.store.base import SessionStore


class App:
    """Facade for all application operations, the single entry point for the HTTP layer."""

    def __init__(self, config: Config, store: SessionStore | None = None) -> None:
        self._core = Core(config, store)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def create_session(self, title: str, description: str | None, mode: str) -> Session:
        """Create a session with a fresh shareable code."""
        return await self._core.services.session.create_session(title, description, mode)

    async def get_session(self, code: str) -> Session:
        return await self._core.services.session.get_session(code)

    async def list_sessions(self) -> list[SessionOverview]:
        """List all sessions with the time passed since each started."""
        return await self._core.services.session.list_sessions()

    async def end_session(self, code: str) -> Session:
        """Close a session so its actions are no longer recomputed."""
        return await self._core.services.session.end_session(code)

    async def append_action(self, code: str, action_type: str, content: str, action_id: int) -> Question | Comment:
        """Post a question or comment to a session."""
        return await self._core.services.action.append_action(code, action_type, content, action_id)

    async def replace_actions(self, code: str, actions: Sequence[Mapping[str, Any]]) -> list[Question | Comment]:
        """Replace the action list of a session wholesale."""
        return await self._core.services.action.replace_actions(code, actions)

    async def get_action_content(self, code: str, action_id: int) -> str | None:
        return await self._core.services.action.get_action_content(code, action_id)

    async def get_actions_with_margins(self, code: str) -> list[ActionTiming]:
        """Get a session's actions with their elapsed times."""
        return await self._core.services.action.get_actions_with_margins(code)

    async def run_sweep_tick(self) -> int:
        """Run one time-margin recomputation immediately."""
        return await self._core.services.sweep.run_tick()
