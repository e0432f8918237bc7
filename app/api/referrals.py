from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.core.config import settings
from app.schemas.referral import ReferralCreate, TopReferrer
from app.stores.base import VoucherStore

router = APIRouter(prefix="/api", tags=["referrals"])


@router.post("/referrals", response_model=dict)
async def create_referral(
    payload: ReferralCreate,
    store: VoucherStore = Depends(get_store),
) -> dict:
    referral = await store.create_referral(payload.model_dump())
    return {"success": True, "id": referral.id}


@router.get("/top-referrers", response_model=list[TopReferrer])
async def top_referrers(store: VoucherStore = Depends(get_store)) -> list[TopReferrer]:
    return await store.top_referrers(limit=settings.TOP_REFERRERS_LIMIT)
