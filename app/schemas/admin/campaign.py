from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.common import RecordOut


class CampaignBase(BaseModel):
    content: str = Field(min_length=1)
    quantity: int = Field(ge=0)
    status: str = "active"


class CampaignCreate(CampaignBase):
    pass


class CampaignOut(CampaignBase, RecordOut):
    pass
