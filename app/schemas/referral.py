from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.common import RecordOut


class ReferralCreate(BaseModel):
    referrer: str = Field(min_length=1)
    referred: str = Field(min_length=1)


class ReferralOut(ReferralCreate, RecordOut):
    pass


class TopReferrer(BaseModel):
    referrer: str
    referrals: int
