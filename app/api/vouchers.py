from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_issuance_service, get_store
from app.schemas.voucher import VoucherCount, VoucherCreate, VoucherOut, VoucherStatusUpdate
from app.services.issuance import IssuanceService
from app.services.vouchers import update_voucher_status
from app.stores.base import VoucherStore

router = APIRouter(prefix="/api", tags=["vouchers"])


@router.post("/vouchers", response_model=dict)
async def create_voucher(
    payload: VoucherCreate,
    service: IssuanceService = Depends(get_issuance_service),
) -> dict:
    voucher = await service.request_voucher(payload)
    return {"success": True, "voucher": voucher.model_dump(mode="json", by_alias=True)}


@router.get("/vouchers/count", response_model=VoucherCount)
async def count_vouchers(
    campaign_id: str | None = Query(default=None, alias="campaignId"),
    service: IssuanceService = Depends(get_issuance_service),
) -> VoucherCount:
    return VoucherCount(count=await service.voucher_count(campaign_id))


@router.put("/voucher/{voucher_id}/status", response_model=dict)
async def set_voucher_status(
    voucher_id: str,
    payload: VoucherStatusUpdate,
    store: VoucherStore = Depends(get_store),
) -> dict:
    updated = await update_voucher_status(store, voucher_id, payload.status)
    return {"success": updated}


@router.get("/my-vouchers", response_model=list[VoucherOut])
async def my_vouchers(
    username: str = Query(..., min_length=1),
    store: VoucherStore = Depends(get_store),
) -> list[VoucherOut]:
    return await store.list_vouchers_by_username(username)
