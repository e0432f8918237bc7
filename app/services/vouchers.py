from __future__ import annotations

from typing import Any

import structlog

from app.stores.base import VoucherStore
from app.utils.time import utc_now

logger = structlog.get_logger(__name__)

STATUS_ISSUED = "Issued"
STATUS_VOID = "Void"


async def update_voucher_status(store: VoucherStore, voucher_id: Any, status: str) -> bool:
    # Issued stamps the claim time, Void clears it, anything else leaves it alone.
    if status == STATUS_ISSUED:
        updated = await store.update_voucher_status(
            voucher_id, status, claimed_at=utc_now(), set_claimed_at=True
        )
    elif status == STATUS_VOID:
        updated = await store.update_voucher_status(
            voucher_id, status, claimed_at=None, set_claimed_at=True
        )
    else:
        updated = await store.update_voucher_status(voucher_id, status)
    logger.info("voucher_status_updated", voucher_id=voucher_id, status=status, updated=updated)
    return updated
