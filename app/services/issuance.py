"""Campaign-bounded voucher issuance.

For every campaign C, the number of vouchers whose ``value`` equals
``C.content`` must not exceed ``C.quantity``. Campaigns and vouchers are linked
by that string equality only, so campaigns sharing ``content`` share one stock
pool, and a voucher created without ``campaignId`` is never checked.

Two modes:

``best_effort``
    Count, then insert, as separate store calls. Concurrent requests against an
    almost exhausted campaign can all pass the count and overshoot ``quantity``.

``strict``
    The store takes one unit of stock and inserts the voucher atomically
    (``VoucherStore.reserve_and_insert_voucher``), so no more than ``quantity``
    requests succeed however many race.
"""

from __future__ import annotations

from typing import Literal

import structlog

from app.core.errors import CampaignNotFoundError, OutOfStockError
from app.schemas.admin.campaign import CampaignOut
from app.schemas.common import EntityId
from app.schemas.voucher import VoucherCreate, VoucherOut
from app.stores.base import VoucherStore

logger = structlog.get_logger(__name__)

IssuanceMode = Literal["strict", "best_effort"]


class IssuanceService:
    def __init__(self, store: VoucherStore, mode: IssuanceMode = "strict") -> None:
        self.store = store
        self.mode = mode

    async def request_voucher(self, request: VoucherCreate) -> VoucherOut:
        fields = request.voucher_fields()
        if request.campaign_id is None:
            voucher = await self.store.insert_voucher(fields)
            logger.info("voucher_issued", voucher_id=voucher.id, campaign_id=None)
            return voucher

        campaign = await self.store.get_campaign(request.campaign_id)
        if campaign is None:
            logger.warning(
                "voucher_rejected", reason="campaign_not_found", campaign_id=request.campaign_id
            )
            raise CampaignNotFoundError(request.campaign_id)

        if fields["value"] != campaign.content:
            logger.info(
                "voucher_value_overridden",
                campaign_id=campaign.id,
                requested=fields["value"],
                content=campaign.content,
            )
        fields["value"] = campaign.content

        with structlog.contextvars.bound_contextvars(
            campaign_id=campaign.id, issuance_mode=self.mode
        ):
            if self.mode == "strict":
                voucher = await self.store.reserve_and_insert_voucher(campaign, fields)
            else:
                voucher = await self._check_then_insert(campaign, fields)
            if voucher is None:
                logger.warning(
                    "voucher_rejected", reason="out_of_stock", quantity=campaign.quantity
                )
                raise OutOfStockError(campaign.id, campaign.content, campaign.quantity)

            logger.info("voucher_issued", voucher_id=voucher.id)
        return voucher

    async def _check_then_insert(self, campaign: CampaignOut, fields: dict) -> VoucherOut | None:
        issued = await self.store.count_vouchers_by_value(campaign.content)
        if issued >= campaign.quantity:
            return None
        return await self.store.insert_voucher(fields)

    async def voucher_count(self, campaign_id: EntityId | None) -> int:
        """Vouchers issued from the campaign's pool; 0 when the campaign is unknown."""
        if campaign_id is None or campaign_id == "":
            return 0
        campaign = await self.store.get_campaign(campaign_id)
        if campaign is None:
            return 0
        return await self.store.count_vouchers_by_value(campaign.content)

