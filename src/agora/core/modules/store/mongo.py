from collections.abc import AsyncIterator, Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

import structlog
from pydantic import ValidationError as PydanticValidationError
from pymongo import ASCENDING, AsyncMongoClient, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from agora.core.modules.action.models import Comment, Question
from agora.core.modules.session.models import Session
from agora.core.modules.store.base import SessionStore
from agora.errors import DuplicateCodeError, StoreError

logger = structlog.get_logger(__name__)

# Legacy documents carried the code in "sessionCode" or the older "sessionID",
# the mode in "sessionType" and the close time in "endTime".
LEGACY_CODE_FILTER: dict[str, Any] = {
    "code": {"$exists": False},
    "$or": [{"sessionCode": {"$exists": True}}, {"sessionID": {"$exists": True}}],
}
LEGACY_CODE_PIPELINE: list[dict[str, Any]] = [
    {
        "$set": {
            "code": {"$ifNull": ["$sessionCode", "$sessionID"]},
            "mode": {"$ifNull": ["$mode", {"$ifNull": ["$sessionType", "normal"]}]},
            "description": {"$ifNull": ["$description", ""]},
            "host_start_time": {
                "$ifNull": ["$host_start_time", {"$ifNull": ["$hostStartTime", {"$ifNull": ["$startTime", "$$NOW"]}]}]
            },
            "ended_at": {"$ifNull": ["$ended_at", {"$ifNull": ["$endTime", None]}]},
            "actions": {"$ifNull": ["$actions", []]},
            "version": {"$ifNull": ["$version", 0]},
        }
    },
    {"$unset": ["sessionCode", "sessionID", "sessionType", "hostStartTime", "startTime", "endTime"]},
]


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Re-raise driver exceptions as store errors."""
    try:
        yield
    except DuplicateKeyError as e:
        raise DuplicateCodeError(str(e)) from e
    except PyMongoError as e:
        raise StoreError(str(e)) from e


class MongoSessionStore(SessionStore):
    """Session store backed by a MongoDB collection."""

    def __init__(
        self, collection: AsyncCollection[dict[str, Any]], client: AsyncMongoClient[dict[str, Any]] | None = None
    ) -> None:
        self._collection = collection
        self._client = client

    @classmethod
    def from_url(cls, database_url: str) -> "MongoSessionStore":
        """Connect to the database named in the URL path and use its 'sessions' collection."""
        client: AsyncMongoClient[dict[str, Any]] = AsyncMongoClient(
            database_url, uuidRepresentation="standard", tz_aware=True
        )
        database = client.get_database(urlparse(database_url).path[1:])
        return cls(database.get_collection("sessions"), client)

    async def on_start(self) -> None:
        """Migrate legacy documents, then create indexes."""
        migrated = await self.migrate_legacy_codes()
        with _translate_errors():
            # Unique index is the final authority on code collisions
            await self._collection.create_index([("code", ASCENDING)], unique=True)
            await self._collection.create_index([("ended_at", ASCENDING)])
        logger.debug("session_store_started", migrated=migrated)

    async def on_stop(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def migrate_legacy_codes(self) -> int:
        """Move legacy 'sessionID' identifiers into the canonical 'code' field."""
        with _translate_errors():
            result = await self._collection.update_many(LEGACY_CODE_FILTER, LEGACY_CODE_PIPELINE)
        if result.modified_count:
            logger.info("legacy_sessions_migrated", count=result.modified_count)
        return result.modified_count

    async def find_by_code(self, code: str) -> Session | None:
        with _translate_errors():
            doc = await self._collection.find_one({"code": code})
        return None if doc is None else _load(doc)

    async def code_exists(self, code: str) -> bool:
        with _translate_errors():
            count = await self._collection.count_documents({"code": code}, limit=1)
        return count > 0

    async def insert(self, session: Session) -> Session:
        with _translate_errors():
            await self._collection.insert_one(session.to_mongo())
        return session

    async def replace_actions(
        self, code: str, actions: Sequence[Question | Comment], expected_version: int
    ) -> Session | None:
        with _translate_errors():
            doc = await self._collection.find_one_and_update(
                {"code": code, "version": expected_version},
                {"$set": {"actions": [action.model_dump() for action in actions]}, "$inc": {"version": 1}},
                return_document=ReturnDocument.AFTER,
            )
        return None if doc is None else _load(doc)

    async def set_ended_at(self, code: str, ended_at: datetime, expected_version: int) -> Session | None:
        with _translate_errors():
            doc = await self._collection.find_one_and_update(
                {"code": code, "version": expected_version, "ended_at": None},
                {"$set": {"ended_at": ended_at}, "$inc": {"version": 1}},
                return_document=ReturnDocument.AFTER,
            )
        return None if doc is None else _load(doc)

    async def find_open_with_actions(self) -> list[Session]:
        query = {"ended_at": None, "actions.0": {"$exists": True}}
        with _translate_errors():
            return [session async for session in _load_each(self._collection.find(query))]

    async def list_sessions(self) -> list[Session]:
        with _translate_errors():
            cursor = self._collection.find().sort("host_start_time", ASCENDING)
            return [session async for session in _load_each(cursor)]


def _load(doc: dict[str, Any]) -> Session:
    """Validate a stored document, reporting an unreadable one as a store error."""
    try:
        return Session.model_validate(doc)
    except PydanticValidationError as e:
        raise StoreError(f"Stored session {doc.get('code')!r} is malformed: {e}") from e


async def _load_each(cursor: Any) -> AsyncIterator[Session]:
    """Yield the readable sessions of a cursor, skipping malformed documents."""
    async for doc in cursor:
        try:
            yield Session.model_validate(doc)
        except PydanticValidationError as e:
            logger.warning(
                "malformed_session_skipped", code=doc.get("code"), id=doc.get("_id"), errors=e.error_count()
            )
