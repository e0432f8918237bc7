from __future__ import annotations

from fastapi import Depends, Request

from app.core.config import settings
from app.services.issuance import IssuanceService
from app.stores.base import VoucherStore


def get_store(request: Request) -> VoucherStore:
    return request.app.state.store


def get_issuance_service(store: VoucherStore = Depends(get_store)) -> IssuanceService:
    return IssuanceService(store, mode=settings.ISSUANCE_MODE)
