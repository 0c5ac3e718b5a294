"""Discussion session models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from agora.core.db import MongoModel
from agora.core.modules.action.models import Action
from agora.core.modules.action.timing import compute_time_margin, format_time_margin
from agora.utils import now


class SessionMode(StrEnum):
    """Presentation behaviour selected by the host; opaque to the engine."""

    NORMAL = "normal"
    COLOR_SHIFT = "colorShift"
    SIZE_PULSE = "sizePulse"


class Session(MongoModel):
    """Discussion session owning an ordered list of actions.

    Indexed on code - unique, ended_at.
    """

    code: str  # Short shareable code, e.g. "K7XQ2M"
    title: str
    description: str = ""
    mode: SessionMode
    host_start_time: datetime = Field(default_factory=now)
    ended_at: datetime | None = None  # Set once the host closes the session
    actions: list[Action] = Field(default_factory=list)  # Append-ordered
    version: int = 0  # Incremented on every write, used for compare-and-swap

    @property
    def is_open(self) -> bool:
        return self.ended_at is None


class SessionOverview(BaseModel):
    """Session with the time elapsed since the host started it."""

    session: Session = Field(..., description="The session record")
    host_time_passed: float | None = Field(..., description="Seconds since host_start_time")
    host_time_passed_text: str | None = Field(..., description="Human-readable elapsed time")

    @classmethod
    def from_domain(cls, session: Session, current: datetime) -> "SessionOverview":
        seconds = compute_time_margin(session.host_start_time, current)
        return cls(session=session, host_time_passed=seconds, host_time_passed_text=format_time_margin(seconds))
