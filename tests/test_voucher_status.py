from datetime import datetime, timezone

from app.services.vouchers import update_voucher_status


async def _create(store, **overrides):
    fields = {
        "username": "bob",
        "value": "10% off",
        "prize": "wheel",
        "status": "Pending",
        "claimed_at": None,
    }
    fields.update(overrides)
    return await store.insert_voucher(fields)


async def _reload(store, voucher_id):
    return next(item for item in await store.list_vouchers() if item.id == voucher_id)


def test_issued_sets_claimed_at(run_store) -> None:
    async def scenario(store):
        voucher = await _create(store)
        updated = await update_voucher_status(store, voucher.id, "Issued")
        return voucher, updated, await _reload(store, voucher.id)

    before, updated, after = run_store(scenario)

    assert updated is True
    assert after.status == "Issued"
    assert after.claimed_at is not None
    assert after.claimed_at.tzinfo is not None
    assert (after.username, after.value, after.prize) == (
        before.username,
        before.value,
        before.prize,
    )


def test_void_clears_claimed_at(run_store) -> None:
    claimed = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

    async def scenario(store):
        voucher = await _create(store, status="Issued", claimed_at=claimed)
        updated = await update_voucher_status(store, voucher.id, "Void")
        return voucher, updated, await _reload(store, voucher.id)

    before, updated, after = run_store(scenario)

    assert before.claimed_at == claimed
    assert updated is True
    assert after.status == "Void"
    assert after.claimed_at is None
    assert (after.username, after.value, after.prize) == ("bob", "10% off", "wheel")


def test_other_status_keeps_claimed_at(run_store) -> None:
    claimed = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

    async def scenario(store):
        voucher = await _create(store, status="Issued", claimed_at=claimed)
        updated = await update_voucher_status(store, voucher.id, "Redeemed")
        return updated, await _reload(store, voucher.id)

    updated, after = run_store(scenario)

    assert updated is True
    assert after.status == "Redeemed"
    assert after.claimed_at == claimed


def test_unknown_voucher_reports_no_update(run_store) -> None:
    async def scenario(store):
        await _create(store)
        return (
            await update_voucher_status(store, "999999", "Issued"),
            await update_voucher_status(store, "not-an-id", "Void"),
        )

    assert run_store(scenario) == (False, False)
