import asyncio

import pytest
import structlog

from app.api.deps import get_store
from app.core.config import Settings
from app.core.errors import OutOfStockError
from app.core.logging import setup_logging
from app.main import app
from app.schemas.admin.campaign import CampaignOut
from app.schemas.voucher import VoucherCreate
from app.services.issuance import IssuanceService


class ContextRecordingStore:
    def __init__(self) -> None:
        self.context: dict | None = None

    async def get_campaign(self, campaign_id):
        return CampaignOut(id=7, content="limited", quantity=0)

    async def reserve_and_insert_voucher(self, campaign, fields):
        self.context = structlog.contextvars.get_contextvars()
        return None

    async def list_vouchers_by_username(self, username):
        self.context = structlog.contextvars.get_contextvars()
        return []


def test_issuance_binds_campaign_context_while_it_runs() -> None:
    store = ContextRecordingStore()

    async def scenario():
        with pytest.raises(OutOfStockError):
            await IssuanceService(store).request_voucher(
                VoucherCreate(username="alice", value="limited", campaignId=7)
            )
        return structlog.contextvars.get_contextvars()

    after = asyncio.run(scenario())

    assert store.context["campaign_id"] == 7
    assert store.context["issuance_mode"] == "strict"
    assert "campaign_id" not in after


def test_requests_bind_method_and_path(client) -> None:
    store = ContextRecordingStore()
    app.dependency_overrides[get_store] = lambda: store

    response = client.get("/api/my-vouchers", params={"username": "alice"})

    assert response.status_code == 200
    assert store.context["method"] == "GET"
    assert store.context["path"] == "/api/my-vouchers"


def test_setup_logging_stamps_app_env() -> None:
    try:
        setup_logging(Settings(APP_ENV="test", LOG_LEVEL="DEBUG"))
        processors = structlog.get_config()["processors"]
        event = {"event": "voucher_issued"}
        for processor in processors[:2]:
            event = processor(None, "info", event)
    finally:
        structlog.reset_defaults()

    assert event["app_env"] == "test"
