from __future__ import annotations

import asyncio
from typing import Any, TypeVar

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import (
    ConnectionFailure,
    DuplicateKeyError,
    ExecutionTimeout,
    PyMongoError,
    WTimeoutError,
)

from app.core.config import Settings
from app.schemas.admin.campaign import CampaignOut
from app.schemas.admin.referral_reward import ReferralRewardOut
from app.schemas.admin.spin_wheel import SpinWheelPrizeOut
from app.schemas.referral import ReferralOut, TopReferrer
from app.schemas.voucher import VoucherOut
from app.stores.base import GuardedStore, store_operation
from app.utils.time import utc_now

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

COLLECTIONS = (
    "voucher_campaigns",
    "vouchers",
    "campaign_stock",
    "referrals",
    "spin_wheel_config",
    "referral_rewards",
)
NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


def parse_object_id(raw: Any) -> ObjectId | None:
    if isinstance(raw, ObjectId):
        return raw
    if isinstance(raw, str) and ObjectId.is_valid(raw):
        return ObjectId(raw)
    return None


def to_model(model: type[ModelT], document: dict[str, Any]) -> ModelT:
    data = dict(document)
    data["id"] = str(data.pop("_id"))
    return model.model_validate(data)


class MongoVoucherStore(GuardedStore):
    """Document adapter. ``campaign_stock`` documents are keyed by campaign content."""

    driver_errors = (PyMongoError,)

    def __init__(self, client: Any, database_name: str, timeout: float) -> None:
        super().__init__(timeout)
        self.client = client
        self.db: AsyncIOMotorDatabase = client[database_name]

    @classmethod
    def from_settings(cls, settings: Settings) -> MongoVoucherStore:
        client = AsyncIOMotorClient(
            settings.DATABASE_URL,
            serverSelectionTimeoutMS=int(settings.STORE_TIMEOUT_SEC * 1000),
            tz_aware=True,
        )
        return cls(client, settings.MONGO_DATABASE, timeout=settings.STORE_TIMEOUT_SEC)

    def classify(self, exc: BaseException) -> str:
        if isinstance(exc, DuplicateKeyError):
            return "integrity"
        if isinstance(exc, (ExecutionTimeout, WTimeoutError)):
            return "timeout"
        if isinstance(exc, ConnectionFailure):
            return "unavailable"
        return "error"

    @store_operation
    async def initialize(self) -> None:
        await self.db.vouchers.create_index([("value", ASCENDING)])
        await self.db.vouchers.create_index([("username", ASCENDING)])
        await self.db.referrals.create_index([("referrer", ASCENDING)])
        await self.db.spin_wheel_config.create_index([("status", ASCENDING)])
        logger.info("store_initialized", backend="mongodb", database=self.db.name)

    async def close(self) -> None:
        self.client.close()

    @store_operation
    async def reset(self) -> None:
        for name in COLLECTIONS:
            await self.db[name].delete_many({})
        logger.warning("store_reset", backend="mongodb", database=self.db.name)

    @store_operation
    async def ping(self) -> bool:
        await self.db.command("ping")
        return True

    async def _find(
        self,
        collection: str,
        model: type[ModelT],
        query: dict[str, Any],
        sort: list[tuple[str, int]],
    ) -> list[ModelT]:
        cursor = self.db[collection].find(query, sort=sort)
        return [to_model(model, document) async for document in cursor]

    async def _insert(
        self, collection: str, model: type[ModelT], fields: dict[str, Any]
    ) -> ModelT:
        document = {**fields, "created_at": utc_now()}
        result = await self.db[collection].insert_one(document)
        document["_id"] = result.inserted_id
        return to_model(model, document)

    async def _delete(self, collection: str, raw_id: Any) -> bool:
        key = parse_object_id(raw_id)
        if key is None:
            return False
        result = await self.db[collection].delete_one({"_id": key})
        return result.deleted_count > 0

    async def _update_status(self, collection: str, raw_id: Any, fields: dict[str, Any]) -> bool:
        key = parse_object_id(raw_id)
        if key is None:
            return False
        result = await self.db[collection].update_one({"_id": key}, {"$set": fields})
        return result.matched_count > 0

    @store_operation
    async def get_campaign(self, campaign_id: Any) -> CampaignOut | None:
        key = parse_object_id(campaign_id)
        if key is None:
            return None
        document = await self.db.voucher_campaigns.find_one({"_id": key})
        return to_model(CampaignOut, document) if document else None

    @store_operation
    async def count_vouchers_by_value(self, value: str | None) -> int:
        return await self.db.vouchers.count_documents({"value": value})

    @store_operation
    async def insert_voucher(self, fields: dict[str, Any]) -> VoucherOut:
        value = fields.get("value")
        if value is not None:
            # Count first, so a seeded counter never trails the vouchers it covers.
            counted = await self.db.campaign_stock.update_one(
                {"_id": value}, {"$inc": {"issued": 1}}
            )
            if counted.modified_count:
                return await self._insert_holding_stock(value, fields)
        return await self._insert("vouchers", VoucherOut, fields)

    async def _insert_holding_stock(self, content: str, fields: dict[str, Any]) -> VoucherOut:
        """Insert a voucher whose stock unit is already taken.

        Any failure, cancellation by the store timeout included, hands the unit
        back and removes the voucher in case the write landed anyway.
        """
        voucher_id = ObjectId()
        try:
            return await self._insert("vouchers", VoucherOut, {**fields, "_id": voucher_id})
        except BaseException:
            try:
                await asyncio.shield(self._release_stock(content, voucher_id))
            except PyMongoError as exc:
                logger.error(
                    "stock_release_failed",
                    content=content,
                    voucher_id=str(voucher_id),
                    error=str(exc),
                )
            raise

    async def _release_stock(self, content: str, voucher_id: ObjectId) -> None:
        await self.db.vouchers.delete_one({"_id": voucher_id})
        await self.db.campaign_stock.update_one({"_id": content}, {"$inc": {"issued": -1}})
        logger.warning("stock_released", content=content, voucher_id=str(voucher_id))

    async def _ensure_stock(self, content: str) -> None:
        if await self.db.campaign_stock.find_one({"_id": content}) is not None:
            return
        issued = await self.db.vouchers.count_documents({"value": content})
        try:
            await self.db.campaign_stock.update_one(
                {"_id": content}, {"$setOnInsert": {"issued": issued}}, upsert=True
            )
        except DuplicateKeyError:
            # Seeded concurrently by another request.
            return

    @store_operation
    async def reserve_and_insert_voucher(
        self, campaign: CampaignOut, fields: dict[str, Any]
    ) -> VoucherOut | None:
        await self._ensure_stock(campaign.content)
        reserved = await self.db.campaign_stock.find_one_and_update(
            {"_id": campaign.content, "issued": {"$lt": campaign.quantity}},
            {"$inc": {"issued": 1}},
        )
        if reserved is None:
            return None
        return await self._insert_holding_stock(campaign.content, fields)

    @store_operation
    async def update_voucher_status(
        self,
        voucher_id: Any,
        status: str,
        claimed_at: Any = None,
        set_claimed_at: bool = False,
    ) -> bool:
        fields: dict[str, Any] = {"status": status}
        if set_claimed_at:
            fields["claimed_at"] = claimed_at
        return await self._update_status("vouchers", voucher_id, fields)

    @store_operation
    async def list_vouchers(self) -> list[VoucherOut]:
        # Nulls sort lowest, so a descending sort leaves unclaimed vouchers last.
        return await self._find(
            "vouchers", VoucherOut, {}, [("claimed_at", DESCENDING), ("_id", DESCENDING)]
        )

    @store_operation
    async def list_vouchers_by_username(self, username: str) -> list[VoucherOut]:
        return await self._find("vouchers", VoucherOut, {"username": username}, [("_id", ASCENDING)])

    @store_operation
    async def list_usernames(self) -> list[str]:
        usernames: dict[str, None] = {}
        for collection, field in (
            ("vouchers", "username"),
            ("referrals", "referrer"),
            ("referrals", "referred"),
        ):
            for name in await self.db[collection].distinct(field):
                if name:
                    usernames.setdefault(name, None)
        return list(usernames)

    @store_operation
    async def list_campaigns(self) -> list[CampaignOut]:
        return await self._find("voucher_campaigns", CampaignOut, {}, NEWEST_FIRST)

    @store_operation
    async def create_campaign(self, fields: dict[str, Any]) -> CampaignOut:
        return await self._insert("voucher_campaigns", CampaignOut, fields)

    @store_operation
    async def delete_campaign(self, campaign_id: Any) -> bool:
        return await self._delete("voucher_campaigns", campaign_id)

    @store_operation
    async def create_referral(self, fields: dict[str, Any]) -> ReferralOut:
        return await self._insert("referrals", ReferralOut, fields)

    @store_operation
    async def list_referrals(self) -> list[ReferralOut]:
        return await self._find("referrals", ReferralOut, {}, NEWEST_FIRST)

    @store_operation
    async def top_referrers(self, limit: int = 10) -> list[TopReferrer]:
        pipeline = [
            {"$group": {"_id": "$referrer", "referrals": {"$sum": 1}}},
            {"$sort": {"referrals": -1, "_id": 1}},
            {"$limit": limit},
        ]
        return [
            TopReferrer(referrer=row["_id"], referrals=row["referrals"])
            async for row in self.db.referrals.aggregate(pipeline)
        ]

    @store_operation
    async def list_active_prizes(self) -> list[SpinWheelPrizeOut]:
        return await self._find(
            "spin_wheel_config", SpinWheelPrizeOut, {"status": "active"}, NEWEST_FIRST
        )

    @store_operation
    async def replace_prizes(self, prizes: list[dict[str, Any]]) -> list[SpinWheelPrizeOut]:
        # Not atomic: a reader between the two steps may see an empty wheel.
        await self.db.spin_wheel_config.delete_many({})
        return [
            await self._insert("spin_wheel_config", SpinWheelPrizeOut, prize)
            for prize in prizes
        ]

    @store_operation
    async def update_prize_status(self, prize_id: Any, status: str) -> bool:
        return await self._update_status("spin_wheel_config", prize_id, {"status": status})

    @store_operation
    async def list_referral_rewards(self) -> list[ReferralRewardOut]:
        return await self._find("referral_rewards", ReferralRewardOut, {}, NEWEST_FIRST)

    @store_operation
    async def create_referral_reward(self, fields: dict[str, Any]) -> ReferralRewardOut:
        return await self._insert("referral_rewards", ReferralRewardOut, fields)

    @store_operation
    async def delete_referral_reward(self, reward_id: Any) -> bool:
        return await self._delete("referral_rewards", reward_id)
