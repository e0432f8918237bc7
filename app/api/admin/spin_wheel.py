from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.schemas.admin.spin_wheel import PrizeStatusUpdate, SpinWheelConfig, SpinWheelPrizeOut
from app.stores.base import VoucherStore

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/admin/spin-wheel", tags=["admin"])


@router.get("", response_model=list[SpinWheelPrizeOut])
async def list_prizes(store: VoucherStore = Depends(get_store)) -> list[SpinWheelPrizeOut]:
    return await store.list_active_prizes()


@router.post("", response_model=dict)
async def replace_prizes(
    payload: SpinWheelConfig,
    store: VoucherStore = Depends(get_store),
) -> dict:
    prizes = await store.replace_prizes([prize.model_dump() for prize in payload.prizes])
    logger.info("spin_wheel_replaced", prizes=len(prizes))
    return {"success": True}


@router.put("/{prize_id}/status", response_model=dict)
async def set_prize_status(
    prize_id: str,
    payload: PrizeStatusUpdate,
    store: VoucherStore = Depends(get_store),
) -> dict:
    return {"success": await store.update_prize_status(prize_id, payload.status)}
