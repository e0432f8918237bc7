from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import RecordOut, blank_to_none


class ReferralRewardBase(BaseModel):
    content: str = Field(min_length=1)
    status: str = "active"

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> Any:
        return blank_to_none(value) or "active"


class ReferralRewardCreate(ReferralRewardBase):
    pass


class ReferralRewardOut(ReferralRewardBase, RecordOut):
    pass
