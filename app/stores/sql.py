from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import delete, func, select, text, update
from sqlalchemy.exc import (
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from app.core.config import Settings
from app.core.database import build_engine, build_sessionmaker
from app.models import (
    Base,
    Campaign,
    CampaignStock,
    Referral,
    ReferralReward,
    SpinWheelPrize,
    Voucher,
)
from app.schemas.admin.campaign import CampaignOut
from app.schemas.admin.referral_reward import ReferralRewardOut
from app.schemas.admin.spin_wheel import SpinWheelPrizeOut
from app.schemas.referral import ReferralOut, TopReferrer
from app.schemas.voucher import VoucherOut
from app.stores.base import GuardedStore, store_operation

logger = structlog.get_logger(__name__)


def parse_id(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def _value_filter(value: str | None):
    if value is None:
        return Voucher.value.is_(None)
    return Voucher.value == value


class SqlVoucherStore(GuardedStore):
    """SQLite (memory or file) and PostgreSQL through the async ORM."""

    driver_errors = (SQLAlchemyError,)

    def __init__(self, engine: AsyncEngine, timeout: float) -> None:
        super().__init__(timeout)
        self.engine = engine
        self.sessionmaker = build_sessionmaker(engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> SqlVoucherStore:
        return cls(build_engine(settings), timeout=settings.STORE_TIMEOUT_SEC)

    def classify(self, exc: BaseException) -> str:
        if isinstance(exc, IntegrityError):
            return "integrity"
        if isinstance(exc, PoolTimeoutError):
            return "timeout"
        if isinstance(exc, (OperationalError, InterfaceError)):
            return "unavailable"
        return "error"

    @store_operation
    async def initialize(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("store_initialized", backend=self.engine.dialect.name)

    async def close(self) -> None:
        await self.engine.dispose()

    @store_operation
    async def reset(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        logger.warning("store_reset", backend=self.engine.dialect.name)

    @store_operation
    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    @store_operation
    async def get_campaign(self, campaign_id: Any) -> CampaignOut | None:
        key = parse_id(campaign_id)
        if key is None:
            return None
        async with self.sessionmaker() as session:
            campaign = await session.get(Campaign, key)
            return CampaignOut.model_validate(campaign) if campaign else None

    @store_operation
    async def count_vouchers_by_value(self, value: str | None) -> int:
        async with self.sessionmaker() as session:
            total = await session.scalar(
                select(func.count()).select_from(Voucher).where(_value_filter(value))
            )
            return total or 0

    async def _add_voucher(self, session: AsyncSession, fields: dict[str, Any]) -> Voucher:
        voucher = Voucher(**fields)
        session.add(voucher)
        await session.flush()
        await session.refresh(voucher)
        return voucher

    @store_operation
    async def insert_voucher(self, fields: dict[str, Any]) -> VoucherOut:
        async with self.sessionmaker() as session:
            async with session.begin():
                voucher = await self._add_voucher(session, fields)
                if voucher.value is not None:
                    # Keep any stock counter for this value in step with the voucher count.
                    await session.execute(
                        update(CampaignStock)
                        .where(CampaignStock.content == voucher.value)
                        .values(issued=CampaignStock.issued + 1)
                    )
            return VoucherOut.model_validate(voucher)

    async def _ensure_stock(self, content: str) -> None:
        async with self.sessionmaker() as session:
            try:
                async with session.begin():
                    if await session.get(CampaignStock, content) is not None:
                        return
                    issued = await session.scalar(
                        select(func.count()).select_from(Voucher).where(Voucher.value == content)
                    )
                    session.add(CampaignStock(content=content, issued=issued or 0))
            except IntegrityError:
                # Seeded concurrently by another request.
                return

    @store_operation
    async def reserve_and_insert_voucher(
        self, campaign: CampaignOut, fields: dict[str, Any]
    ) -> VoucherOut | None:
        await self._ensure_stock(campaign.content)
        async with self.sessionmaker() as session:
            async with session.begin():
                reserved = await session.execute(
                    update(CampaignStock)
                    .where(CampaignStock.content == campaign.content)
                    .where(CampaignStock.issued < campaign.quantity)
                    .values(issued=CampaignStock.issued + 1)
                )
                if reserved.rowcount == 0:
                    return None
                voucher = await self._add_voucher(session, fields)
            return VoucherOut.model_validate(voucher)

    @store_operation
    async def update_voucher_status(
        self,
        voucher_id: Any,
        status: str,
        claimed_at: Any = None,
        set_claimed_at: bool = False,
    ) -> bool:
        key = parse_id(voucher_id)
        if key is None:
            return False
        values: dict[str, Any] = {"status": status}
        if set_claimed_at:
            values["claimed_at"] = claimed_at
        async with self.sessionmaker() as session:
            async with session.begin():
                result = await session.execute(
                    update(Voucher).where(Voucher.id == key).values(**values)
                )
            return result.rowcount > 0

    @store_operation
    async def list_vouchers(self) -> list[VoucherOut]:
        async with self.sessionmaker() as session:
            result = await session.execute(
                select(Voucher).order_by(Voucher.claimed_at.desc().nulls_last(), Voucher.id.desc())
            )
            return [VoucherOut.model_validate(item) for item in result.scalars().all()]

    @store_operation
    async def list_vouchers_by_username(self, username: str) -> list[VoucherOut]:
        async with self.sessionmaker() as session:
            result = await session.execute(
                select(Voucher).where(Voucher.username == username).order_by(Voucher.id)
            )
            return [VoucherOut.model_validate(item) for item in result.scalars().all()]

    @store_operation
    async def list_usernames(self) -> list[str]:
        queries = [
            select(Voucher.username).where(Voucher.username.is_not(None)).distinct(),
            select(Referral.referrer).distinct(),
            select(Referral.referred).distinct(),
        ]
        usernames: dict[str, None] = {}
        async with self.sessionmaker() as session:
            for query in queries:
                for name in (await session.execute(query)).scalars():
                    if name:
                        usernames.setdefault(name, None)
        return list(usernames)

    @store_operation
    async def list_campaigns(self) -> list[CampaignOut]:
        async with self.sessionmaker() as session:
            result = await session.execute(
                select(Campaign).order_by(Campaign.created_at.desc(), Campaign.id.desc())
            )
            return [CampaignOut.model_validate(item) for item in result.scalars().all()]

    @store_operation
    async def create_campaign(self, fields: dict[str, Any]) -> CampaignOut:
        async with self.sessionmaker() as session:
            async with session.begin():
                campaign = Campaign(**fields)
                session.add(campaign)
                await session.flush()
                await session.refresh(campaign)
            return CampaignOut.model_validate(campaign)

    async def _delete_by_id(self, model: type[Base], raw_id: Any) -> bool:
        key = parse_id(raw_id)
        if key is None:
            return False
        async with self.sessionmaker() as session:
            async with session.begin():
                result = await session.execute(delete(model).where(model.id == key))
            return result.rowcount > 0

    @store_operation
    async def delete_campaign(self, campaign_id: Any) -> bool:
        return await self._delete_by_id(Campaign, campaign_id)

    @store_operation
    async def create_referral(self, fields: dict[str, Any]) -> ReferralOut:
        async with self.sessionmaker() as session:
            async with session.begin():
                referral = Referral(**fields)
                session.add(referral)
                await session.flush()
                await session.refresh(referral)
            return ReferralOut.model_validate(referral)

    @store_operation
    async def list_referrals(self) -> list[ReferralOut]:
        async with self.sessionmaker() as session:
            result = await session.execute(
                select(Referral).order_by(Referral.created_at.desc(), Referral.id.desc())
            )
            return [ReferralOut.model_validate(item) for item in result.scalars().all()]

    @store_operation
    async def top_referrers(self, limit: int = 10) -> list[TopReferrer]:
        referrals = func.count().label("referrals")
        query = (
            select(Referral.referrer, referrals)
            .group_by(Referral.referrer)
            .order_by(referrals.desc(), Referral.referrer.asc())
            .limit(limit)
        )
        async with self.sessionmaker() as session:
            result = await session.execute(query)
            return [
                TopReferrer(referrer=row.referrer, referrals=row.referrals)
                for row in result.all()
            ]

    @store_operation
    async def list_active_prizes(self) -> list[SpinWheelPrizeOut]:
        async with self.sessionmaker() as session:
            result = await session.execute(
                select(SpinWheelPrize)
                .where(SpinWheelPrize.status == "active")
                .order_by(SpinWheelPrize.created_at.desc(), SpinWheelPrize.id.desc())
            )
            return [SpinWheelPrizeOut.model_validate(item) for item in result.scalars().all()]

    @store_operation
    async def replace_prizes(self, prizes: list[dict[str, Any]]) -> list[SpinWheelPrizeOut]:
        async with self.sessionmaker() as session:
            async with session.begin():
                await session.execute(delete(SpinWheelPrize))
                rows = [
                    SpinWheelPrize(**{**prize, "campaign_id": parse_id(prize.get("campaign_id"))})
                    for prize in prizes
                ]
                session.add_all(rows)
                await session.flush()
                for row in rows:
                    await session.refresh(row)
            return [SpinWheelPrizeOut.model_validate(row) for row in rows]

    @store_operation
    async def update_prize_status(self, prize_id: Any, status: str) -> bool:
        key = parse_id(prize_id)
        if key is None:
            return False
        async with self.sessionmaker() as session:
            async with session.begin():
                result = await session.execute(
                    update(SpinWheelPrize).where(SpinWheelPrize.id == key).values(status=status)
                )
            return result.rowcount > 0

    @store_operation
    async def list_referral_rewards(self) -> list[ReferralRewardOut]:
        async with self.sessionmaker() as session:
            result = await session.execute(
                select(ReferralReward).order_by(
                    ReferralReward.created_at.desc(), ReferralReward.id.desc()
                )
            )
            return [ReferralRewardOut.model_validate(item) for item in result.scalars().all()]

    @store_operation
    async def create_referral_reward(self, fields: dict[str, Any]) -> ReferralRewardOut:
        async with self.sessionmaker() as session:
            async with session.begin():
                reward = ReferralReward(**fields)
                session.add(reward)
                await session.flush()
                await session.refresh(reward)
            return ReferralRewardOut.model_validate(reward)

    @store_operation
    async def delete_referral_reward(self, reward_id: Any) -> bool:
        return await self._delete_by_id(ReferralReward, reward_id)
