"""Persistence contract shared by the SQL and document adapters.

Adapters only persist. The stock rule lives in
``app.services.issuance.IssuanceService`` and is written once against this
contract.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any, Awaitable, Callable, Protocol, TypeVar

import structlog

from app.core.errors import StoreError
from app.schemas.admin.campaign import CampaignOut
from app.schemas.admin.referral_reward import ReferralRewardOut
from app.schemas.admin.spin_wheel import SpinWheelPrizeOut
from app.schemas.referral import ReferralOut, TopReferrer
from app.schemas.voucher import VoucherOut

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class VoucherStore(Protocol):
    """Contract every persistence adapter implements."""

    async def initialize(self) -> None:
        """Create tables, collections and indexes if missing"""
        ...

    async def close(self) -> None:
        ...

    async def reset(self) -> None:
        """Drop every record of every entity"""
        ...

    async def ping(self) -> bool:
        ...

    # Issuance
    async def get_campaign(self, campaign_id: Any) -> CampaignOut | None:
        ...

    async def count_vouchers_by_value(self, value: str | None) -> int:
        """Count vouchers whose value equals ``value``.

        Reflects every ``insert_voucher`` call that returned before it was invoked.
        """
        ...

    async def insert_voucher(self, fields: dict[str, Any]) -> VoucherOut:
        ...

    async def reserve_and_insert_voucher(
        self, campaign: CampaignOut, fields: dict[str, Any]
    ) -> VoucherOut | None:
        """Atomically take one unit of the campaign's stock and insert the voucher.

        Returns None, with nothing written, when the stock pool is exhausted.
        """
        ...

    # Vouchers
    async def update_voucher_status(
        self,
        voucher_id: Any,
        status: str,
        claimed_at: Any = None,
        set_claimed_at: bool = False,
    ) -> bool:
        ...

    async def list_vouchers(self) -> list[VoucherOut]:
        ...

    async def list_vouchers_by_username(self, username: str) -> list[VoucherOut]:
        ...

    async def list_usernames(self) -> list[str]:
        ...

    # Campaigns
    async def list_campaigns(self) -> list[CampaignOut]:
        ...

    async def create_campaign(self, fields: dict[str, Any]) -> CampaignOut:
        ...

    async def delete_campaign(self, campaign_id: Any) -> bool:
        ...

    # Referrals
    async def create_referral(self, fields: dict[str, Any]) -> ReferralOut:
        ...

    async def list_referrals(self) -> list[ReferralOut]:
        ...

    async def top_referrers(self, limit: int = 10) -> list[TopReferrer]:
        ...

    # Spin wheel
    async def list_active_prizes(self) -> list[SpinWheelPrizeOut]:
        ...

    async def replace_prizes(self, prizes: list[dict[str, Any]]) -> list[SpinWheelPrizeOut]:
        ...

    async def update_prize_status(self, prize_id: Any, status: str) -> bool:
        ...

    # Referral rewards
    async def list_referral_rewards(self) -> list[ReferralRewardOut]:
        ...

    async def create_referral_reward(self, fields: dict[str, Any]) -> ReferralRewardOut:
        ...

    async def delete_referral_reward(self, reward_id: Any) -> bool:
        ...


def store_operation(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Run an adapter method under the store timeout and wrap driver errors."""

    @functools.wraps(func)
    async def wrapper(self: GuardedStore, *args: Any, **kwargs: Any) -> T:
        return await self.guarded(func.__name__, func(self, *args, **kwargs))

    return wrapper


class GuardedStore:
    driver_errors: tuple[type[BaseException], ...] = ()

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout

    def classify(self, exc: BaseException) -> str:
        return "error"

    async def guarded(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error("store_error", operation=operation, reason="timeout")
            raise StoreError(
                f"Store operation {operation} timed out after {self.timeout}s",
                reason="timeout",
            ) from exc
        except self.driver_errors as exc:
            reason = self.classify(exc)
            logger.error("store_error", operation=operation, reason=reason, error=str(exc))
            raise StoreError(str(exc), reason=reason) from exc
