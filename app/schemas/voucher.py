from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import EntityId, RecordOut, blank_to_none
from app.utils.time import as_utc, parse_timestamp


class VoucherFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str | None = None
    value: str | None = None
    prize: str | None = None
    status: str | None = None
    claimed_at: datetime | None = Field(default=None, alias="claimedAt")

    @field_validator("claimed_at", mode="before")
    @classmethod
    def parse_claimed_at(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)


class VoucherCreate(VoucherFields):
    campaign_id: EntityId | None = Field(default=None, alias="campaignId")

    @field_validator("campaign_id", mode="before")
    @classmethod
    def parse_campaign_id(cls, value: Any) -> Any:
        return blank_to_none(value)

    def voucher_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude={"campaign_id"})


class VoucherOut(VoucherFields, RecordOut):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @field_validator("claimed_at", mode="after")
    @classmethod
    def claimed_at_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class VoucherStatusUpdate(BaseModel):
    status: str = Field(min_length=1)


class VoucherCount(BaseModel):
    count: int
