"""Persistence contract for session documents."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from agora.core.modules.action.models import Comment, Question
from agora.core.modules.session.models import Session


class SessionStore(ABC):
    """Document store keyed by session code.

    Every write that touches ``actions`` or ``ended_at`` is conditional on the
    caller's ``expected_version`` and increments the stored version. A
    conditional write that does not match returns None instead of raising, so
    callers can re-read and retry. Driver failures surface as StoreError.
    """

    async def on_start(self) -> None:
        """Prepare the store on application startup."""

    async def on_stop(self) -> None:
        """Release store resources on application shutdown."""

    @abstractmethod
    async def find_by_code(self, code: str) -> Session | None:
        """Return the session with this code, or None."""

    @abstractmethod
    async def code_exists(self, code: str) -> bool:
        """Check whether any session uses this code."""

    @abstractmethod
    async def insert(self, session: Session) -> Session:
        """Insert a new session. Raises DuplicateCodeError if the code is taken."""

    @abstractmethod
    async def replace_actions(
        self, code: str, actions: Sequence[Question | Comment], expected_version: int
    ) -> Session | None:
        """Replace the whole action list if the stored version matches."""

    @abstractmethod
    async def set_ended_at(self, code: str, ended_at: datetime, expected_version: int) -> Session | None:
        """Mark an open session as ended if the stored version matches."""

    @abstractmethod
    async def find_open_with_actions(self) -> list[Session]:
        """Return sessions without ended_at that hold at least one action."""

    @abstractmethod
    async def list_sessions(self) -> list[Session]:
        """Return all sessions, oldest first."""
