from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.schemas.referral import ReferralOut
from app.schemas.voucher import VoucherOut
from app.stores.base import VoucherStore

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/vouchers", response_model=list[VoucherOut])
async def list_vouchers(store: VoucherStore = Depends(get_store)) -> list[VoucherOut]:
    return await store.list_vouchers()


@router.get("/referrals", response_model=list[ReferralOut])
async def list_referrals(store: VoucherStore = Depends(get_store)) -> list[ReferralOut]:
    return await store.list_referrals()


@router.get("/users", response_model=list[str])
async def list_users(store: VoucherStore = Depends(get_store)) -> list[str]:
    return await store.list_usernames()
