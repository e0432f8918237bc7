from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from app.utils.time import as_utc

# Integer primary keys on SQL, ObjectId strings on MongoDB.
EntityId = int | str


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class RecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: EntityId
    created_at: datetime | None = None

    @field_validator("created_at", mode="after")
    @classmethod
    def created_at_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)
