from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.core.errors import NotFoundError
from app.schemas.admin.campaign import CampaignCreate, CampaignOut
from app.stores.base import VoucherStore

router = APIRouter(prefix="/api/admin/voucher-campaigns", tags=["admin"])


@router.get("", response_model=list[CampaignOut])
async def list_campaigns(store: VoucherStore = Depends(get_store)) -> list[CampaignOut]:
    return await store.list_campaigns()


@router.post("", response_model=dict)
async def create_campaign(
    payload: CampaignCreate,
    store: VoucherStore = Depends(get_store),
) -> dict:
    campaign = await store.create_campaign(payload.model_dump())
    return {"success": True, "id": campaign.id}


@router.delete("/{campaign_id}", response_model=dict)
async def delete_campaign(
    campaign_id: str,
    store: VoucherStore = Depends(get_store),
) -> dict:
    if not await store.delete_campaign(campaign_id):
        raise NotFoundError("Campaign not found")
    return {"success": True}
