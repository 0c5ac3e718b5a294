from typing import Any
from uuid import UUID, uuid4

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


class MongoModel(BaseModel):
    id: UUID = Field(alias="_id", serialization_alias="id", default_factory=uuid4)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    @field_validator("id", mode="before")
    @classmethod
    def _object_id_to_uuid(cls, value: Any) -> Any:
        # Legacy documents were keyed by ObjectId; map each to a stable UUID
        if isinstance(value, ObjectId):
            return UUID(bytes=value.binary.rjust(16, b"\0"))
        return value

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        if "id" in data:
            data["_id"] = data.pop("id")  # Rename id → _id for MongoDB
        return data
