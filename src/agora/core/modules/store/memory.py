from collections.abc import Sequence
from copy import deepcopy
from datetime import datetime
from typing import Any

from agora.core.modules.action.models import Comment, Question
from agora.core.modules.session.models import Session
from agora.core.modules.store.base import SessionStore
from agora.errors import DuplicateCodeError


class MemorySessionStore(SessionStore):
    """In-process session store for development and tests.

    Documents are kept as plain dicts and copied on every read and write, so
    callers never share mutable state with the store. Each method body runs
    without awaiting, which makes every operation atomic on the event loop.
    """

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}

    async def find_by_code(self, code: str) -> Session | None:
        doc = self._documents.get(code)
        return None if doc is None else self._load(doc)

    async def code_exists(self, code: str) -> bool:
        return code in self._documents

    async def insert(self, session: Session) -> Session:
        if session.code in self._documents:
            raise DuplicateCodeError(f"Session code '{session.code}' already exists")
        self._documents[session.code] = session.to_mongo()
        return session

    async def replace_actions(
        self, code: str, actions: Sequence[Question | Comment], expected_version: int
    ) -> Session | None:
        doc = self._documents.get(code)
        if doc is None or doc["version"] != expected_version:
            return None
        doc["actions"] = [action.model_dump() for action in actions]
        doc["version"] += 1
        return self._load(doc)

    async def set_ended_at(self, code: str, ended_at: datetime, expected_version: int) -> Session | None:
        doc = self._documents.get(code)
        if doc is None or doc["version"] != expected_version or doc["ended_at"] is not None:
            return None
        doc["ended_at"] = ended_at
        doc["version"] += 1
        return self._load(doc)

    async def find_open_with_actions(self) -> list[Session]:
        return [self._load(doc) for doc in self._documents.values() if doc["ended_at"] is None and doc["actions"]]

    async def list_sessions(self) -> list[Session]:
        docs = sorted(self._documents.values(), key=lambda doc: doc["host_start_time"])
        return [self._load(doc) for doc in docs]

    @staticmethod
    def _load(doc: dict[str, Any]) -> Session:
        return Session.model_validate(deepcopy(doc))
