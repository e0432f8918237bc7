import asyncio
from typing import Any, Awaitable, Callable

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from app.core.config import Settings, settings
from app.main import app
from app.stores import MongoVoucherStore, SqlVoucherStore, VoucherStore

Scenario = Callable[[VoucherStore], Awaitable[Any]]


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'rewards.sqlite'}"


def _sql_runner(url: str) -> Callable[[Scenario], Any]:
    def run(scenario: Scenario) -> Any:
        async def _main() -> Any:
            store = SqlVoucherStore.from_settings(Settings(DATABASE_URL=url))
            await store.initialize()
            try:
                return await scenario(store)
            finally:
                await store.close()

        return asyncio.run(_main())

    return run


def _mongo_runner() -> Callable[[Scenario], Any]:
    def run(scenario: Scenario) -> Any:
        async def _main() -> Any:
            store = MongoVoucherStore(AsyncMongoMockClient(), "rewards_test", timeout=5.0)
            await store.initialize()
            return await scenario(store)

        return asyncio.run(_main())

    return run


MEMORY_URL = "sqlite+aiosqlite://"


@pytest.fixture(params=["sql", "sql_memory", "mongo"])
def run_store(request, sqlite_url) -> Callable[[Scenario], Any]:
    """Run a coroutine against a fresh store, once per backend."""
    if request.param == "sql":
        return _sql_runner(sqlite_url)
    if request.param == "sql_memory":
        return _sql_runner(MEMORY_URL)
    return _mongo_runner()


@pytest.fixture
def run_sql(sqlite_url) -> Callable[[Scenario], Any]:
    return _sql_runner(sqlite_url)


@pytest.fixture
def client(sqlite_url, monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_URL", sqlite_url)
    monkeypatch.setattr(settings, "ISSUANCE_MODE", "strict")
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
