from collections.abc import Mapping, Sequence
from typing import Any
from uuid import UUID

import structlog
from pydantic import ValidationError as PydanticValidationError

from agora.core.core import Service
from agora.core.modules.action.models import (
    ACTION_ADAPTER,
    REQUIRED_ACTION_FIELDS,
    ActionTiming,
    ActionType,
    Comment,
    Question,
    build_action,
)
from agora.core.modules.session.models import Session
from agora.errors import (
    ActionNotFoundError,
    ConcurrentModificationError,
    PersistenceVerificationError,
    ValidationError,
)
from agora.utils import now

logger = structlog.get_logger(__name__)


class ActionService(Service):
    """Appends, replaces, and reads the actions attached to a session.

    Every write sends the complete action list, conditional on the session
    version read just before. When another writer got there first the list is
    rebuilt from a fresh read, so no concurrent change is silently dropped.
    """

    async def append_action(self, code: str, action_type: str, content: str, action_id: int) -> Question | Comment:
        """Append a new question or comment to the end of the session's action list."""
        validated_type, content, action_id = validate_action_input(action_type, content, action_id)
        config = self.core.config

        for attempt in range(1, config.write_max_attempts + 1):
            session = await self._get_open_session(code)
            if config.reject_duplicate_action_ids and any(a.action_id == action_id for a in session.actions):
                raise ValidationError(f"Action {action_id} already exists in session '{code}'")

            action = build_action(
                validated_type,
                action_id=action_id,
                content=content,
                start_time=now(),
                time_margin=0.0,
                size=config.default_action_size,
                color=config.default_action_color,
            )
            updated = await self.store.replace_actions(code, [*session.actions, action], session.version)
            if updated is None:
                logger.debug("action_write_conflict", code=code, attempt=attempt)
                continue

            if not any(stored.id == action.id for stored in updated.actions):
                logger.error("action_write_unverified", code=code, action_id=action_id, id=action.id)
                raise PersistenceVerificationError(f"Action {action.id} missing from session '{code}' after write")

            logger.info("action_appended", code=code, action_id=action_id, type=validated_type)
            return action

        raise ConcurrentModificationError(f"Session '{code}' kept changing while appending an action")

    async def replace_actions(self, code: str, raw_actions: Sequence[Mapping[str, Any]]) -> list[Question | Comment]:
        """Replace the session's whole action list, e.g. after a deletion computed by the caller."""
        actions = parse_action_list(raw_actions, reject_duplicates=self.core.config.reject_duplicate_action_ids)
        expected_ids = [action.id for action in actions]

        for attempt in range(1, self.core.config.write_max_attempts + 1):
            session = await self._get_open_session(code)
            updated = await self.store.replace_actions(code, actions, session.version)
            if updated is None:
                logger.debug("action_write_conflict", code=code, attempt=attempt)
                continue

            if [stored.id for stored in updated.actions] != expected_ids:
                logger.error("action_list_write_unverified", code=code, expected=len(expected_ids))
                raise PersistenceVerificationError(f"Action list of session '{code}' differs from what was written")

            logger.info("actions_replaced", code=code, previous=len(session.actions), current=len(actions))
            return updated.actions

        raise ConcurrentModificationError(f"Session '{code}' kept changing while replacing its actions")

    async def get_action_content(self, code: str, action_id: int) -> str | None:
        """Get the content of the first action with the given action_id."""
        session = await self.core.services.session.get_session(code)
        for action in session.actions:
            if action.action_id == action_id:
                return action.content or None
        raise ActionNotFoundError(code, action_id)

    async def get_actions_with_margins(self, code: str) -> list[ActionTiming]:
        """Get every action with its last recomputed time margin."""
        session = await self.core.services.session.get_session(code)
        return [ActionTiming.from_domain(action) for action in session.actions]

    async def _get_open_session(self, code: str) -> Session:
        session = await self.core.services.session.get_session(code)
        if not session.is_open:
            raise ValidationError(f"Session '{code}' has ended")
        return session


def validate_action_input(action_type: str, content: str, action_id: int) -> tuple[ActionType, str, int]:
    """Validate a new action's fields, returning the normalized values."""
    try:
        validated_type = ActionType(action_type)
    except ValueError:
        allowed = ", ".join(t.value for t in ActionType)
        raise ValidationError(f"type must be one of: {allowed}") from None

    content = content.strip() if isinstance(content, str) else ""
    if not content:
        raise ValidationError("content cannot be empty")

    if isinstance(action_id, bool) or not isinstance(action_id, int) or action_id < 1:
        raise ValidationError("actionID must be a positive integer")

    return validated_type, content, action_id


def parse_action_list(raw_actions: Sequence[Mapping[str, Any]], reject_duplicates: bool = False) -> list[Question | Comment]:
    """Validate a caller-computed action list, failing on the first offending element."""
    actions: list[Question | Comment] = []
    seen_ids: set[UUID] = set()
    seen_action_ids: set[int] = set()

    for index, item in enumerate(raw_actions):
        if not isinstance(item, Mapping):
            raise ValidationError(f"Action at index {index} must be an object")

        missing = [name for name in REQUIRED_ACTION_FIELDS if _is_blank(item.get(name))]
        if missing:
            raise ValidationError(f"Action at index {index} is missing required fields: {', '.join(missing)}")

        try:
            action = ACTION_ADAPTER.validate_python(dict(item))
        except PydanticValidationError as e:
            error = e.errors()[0]
            location = ".".join(str(part) for part in error["loc"]) or "type"
            raise ValidationError(f"Action at index {index} is invalid: {location}: {error['msg']}") from None

        if action.id in seen_ids:
            raise ValidationError(f"Action at index {index} repeats id {action.id}")
        seen_ids.add(action.id)
        if reject_duplicates and action.action_id in seen_action_ids:
            raise ValidationError(f"Action at index {index} repeats action_id {action.action_id}")
        seen_action_ids.add(action.action_id)
        actions.append(action.model_copy(update={"content": action.content.strip()}))

    return actions


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
