import structlog

from agora.core.core import Service
from agora.core.modules.session.models import Session, SessionMode, SessionOverview
from agora.errors import (
    ConcurrentModificationError,
    DuplicateCodeError,
    ExhaustedRetriesError,
    SessionNotFoundError,
    ValidationError,
)
from agora.utils import now

logger = structlog.get_logger(__name__)

MIN_TITLE_LENGTH = 3
MAX_DESCRIPTION_LENGTH = 200


class SessionService(Service):
    """Creates, looks up, and closes discussion sessions."""

    async def create_session(self, title: str, description: str | None, mode: str) -> Session:
        """Create a session with a unique code and no actions."""
        title, description, session_mode = validate_session_input(title, description, mode)
        max_attempts = self.core.config.code_max_attempts

        for attempt in range(1, max_attempts + 1):
            code = await self.core.services.code.reserve_unique_code()
            session = Session(code=code, title=title, description=description, mode=session_mode)
            try:
                await self.store.insert(session)
            except DuplicateCodeError:
                # Another creator took the code between the check and the insert
                logger.warning("session_code_collision", code=code, attempt=attempt)
                continue
            logger.info("session_created", code=code, mode=session_mode)
            return session

        raise ExhaustedRetriesError(f"Failed to insert a session with a unique code after {max_attempts} attempts")

    async def get_session(self, code: str) -> Session:
        """Get a session by code."""
        session = await self.store.find_by_code(code)
        if session is None:
            raise SessionNotFoundError(code)
        return session

    async def list_sessions(self) -> list[SessionOverview]:
        """Get all sessions with the time elapsed since each was started."""
        current = now()
        return [SessionOverview.from_domain(session, current) for session in await self.store.list_sessions()]

    async def end_session(self, code: str) -> Session:
        """Close a session, freezing its actions."""
        for _ in range(self.core.config.write_max_attempts):
            session = await self.get_session(code)
            if not session.is_open:
                raise ValidationError(f"Session '{code}' has already ended")

            updated = await self.store.set_ended_at(code, now(), session.version)
            if updated is not None:
                logger.info("session_ended", code=code, action_count=len(updated.actions))
                return updated

        raise ConcurrentModificationError(f"Session '{code}' kept changing while ending it")


def validate_session_input(title: str, description: str | None, mode: str) -> tuple[str, str, SessionMode]:
    """Trim and validate session fields, returning the normalized values."""
    title = title.strip() if isinstance(title, str) else ""
    if not title:
        raise ValidationError("Title cannot be empty")
    if len(title) < MIN_TITLE_LENGTH:
        raise ValidationError(f"Title must be at least {MIN_TITLE_LENGTH} characters")

    description = (description or "").strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")

    try:
        session_mode = SessionMode(mode)
    except ValueError:
        allowed = ", ".join(m.value for m in SessionMode)
        raise ValidationError(f"Mode must be one of: {allowed}") from None

    return title, description, session_mode
