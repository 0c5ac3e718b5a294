"""Action models: questions and comments attached to a session."""

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal, assert_never
from uuid import UUID, uuid4

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, field_validator

from agora.core.modules.action.timing import format_time_margin, parse_start_time


class ActionType(StrEnum):
    """Kinds of actions a participant can post."""

    QUESTION = "question"
    COMMENT = "comment"


class BaseAction(BaseModel):
    """Fields shared by every action variant."""

    id: UUID = Field(default_factory=uuid4)  # Globally unique, never reused
    # Client-supplied and unique only within the session; legacy documents spell it "actionID"
    action_id: int = Field(gt=0, validation_alias=AliasChoices("action_id", "actionID"))
    content: str
    start_time: datetime | None = None
    time_margin: float | None = Field(default=None, validation_alias=AliasChoices("time_margin", "timeMargin"))
    size: float = 48
    color: str = "#16a34a"

    @field_validator("start_time", mode="before")
    @classmethod
    def _normalize_start_time(cls, value: Any) -> datetime | None:
        return parse_start_time(value)


class Question(BaseAction):
    type: Literal["question"] = "question"


class Comment(BaseAction):
    type: Literal["comment"] = "comment"


Action = Annotated[Question | Comment, Field(discriminator="type")]

ACTION_ADAPTER: TypeAdapter[Question | Comment] = TypeAdapter(Action)
REQUIRED_ACTION_FIELDS = ("id", "action_id", "type", "content")


def build_action(action_type: ActionType, **fields: Any) -> Question | Comment:
    """Construct the variant matching action_type."""
    match action_type:
        case ActionType.QUESTION:
            return Question(**fields)
        case ActionType.COMMENT:
            return Comment(**fields)
        case _:
            assert_never(action_type)


class ActionTiming(BaseModel):
    """Action with its elapsed time (API representation for polling clients)."""

    id: UUID = Field(..., description="Action ID")
    action_id: int = Field(..., description="Client-supplied action number")
    type: ActionType = Field(..., description="Action kind")
    start_time: datetime | None = Field(..., description="When the action was posted")
    time_margin: float | None = Field(..., description="Seconds since start_time at the last recomputation")
    time_margin_text: str | None = Field(..., description="Human-readable elapsed time, e.g. '5 seconds ago'")
    size: float = Field(..., description="Presentation size hint")
    color: str = Field(..., description="Presentation color hint")

    @classmethod
    def from_domain(cls, action: Question | Comment) -> "ActionTiming":
        """Create view model from domain model."""
        return cls(
            id=action.id,
            action_id=action.action_id,
            type=ActionType(action.type),
            start_time=action.start_time,
            time_margin=action.time_margin,
            time_margin_text=format_time_margin(action.time_margin),
            size=action.size,
            color=action.color,
        )
