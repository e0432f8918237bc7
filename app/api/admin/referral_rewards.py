from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.core.errors import NotFoundError
from app.schemas.admin.referral_reward import ReferralRewardCreate, ReferralRewardOut
from app.stores.base import VoucherStore

router = APIRouter(prefix="/api/admin/referral-reward", tags=["admin"])


@router.get("", response_model=list[ReferralRewardOut])
async def list_rewards(store: VoucherStore = Depends(get_store)) -> list[ReferralRewardOut]:
    return await store.list_referral_rewards()


@router.post("", response_model=dict)
async def create_reward(
    payload: ReferralRewardCreate,
    store: VoucherStore = Depends(get_store),
) -> dict:
    reward = await store.create_referral_reward(payload.model_dump())
    return {"success": True, "id": reward.id}


@router.delete("/{reward_id}", response_model=dict)
async def delete_reward(
    reward_id: str,
    store: VoucherStore = Depends(get_store),
) -> dict:
    if not await store.delete_referral_reward(reward_id):
        raise NotFoundError("Reward not found")
    return {"success": True}
