from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import EntityId, RecordOut, blank_to_none


class SpinWheelPrizeBase(BaseModel):
    prize_label: str = Field(min_length=1)
    win_chance: float = Field(ge=0)
    campaign_id: EntityId | None = None
    status: str = "active"

    @field_validator("campaign_id", mode="before")
    @classmethod
    def parse_campaign_id(cls, value: Any) -> Any:
        return blank_to_none(value)

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> Any:
        return blank_to_none(value) or "active"


class SpinWheelPrizeIn(SpinWheelPrizeBase):
    pass


class SpinWheelConfig(BaseModel):
    prizes: list[SpinWheelPrizeIn]


class SpinWheelPrizeOut(SpinWheelPrizeBase, RecordOut):
    pass


class PrizeStatusUpdate(BaseModel):
    status: str = Field(min_length=1)
