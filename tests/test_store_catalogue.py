async def _seed_referrals(store) -> None:
    for referrer, referred in [("kim", "a"), ("lee", "b"), ("kim", "c"), ("ann", "d")]:
        await store.create_referral({"referrer": referrer, "referred": referred})


def test_top_referrers_orders_by_count_then_name(run_store) -> None:
    async def scenario(store):
        await _seed_referrals(store)
        return await store.top_referrers(limit=2)

    ranking = run_store(scenario)

    assert [(row.referrer, row.referrals) for row in ranking] == [("kim", 2), ("ann", 1)]


def test_usernames_are_deduplicated(run_store) -> None:
    async def scenario(store):
        await _seed_referrals(store)
        await store.insert_voucher({"username": "kim", "value": "x"})
        await store.insert_voucher({"username": None, "value": "x"})
        return await store.list_usernames()

    usernames = run_store(scenario)

    assert sorted(usernames) == ["a", "ann", "b", "c", "d", "kim", "lee"]


def test_replace_prizes_keeps_only_new_configuration(run_store) -> None:
    async def scenario(store):
        await store.replace_prizes([{"prize_label": "old", "win_chance": 1.0, "status": "active"}])
        created = await store.replace_prizes(
            [
                {"prize_label": "mug", "win_chance": 0.3, "status": "active"},
                {"prize_label": "pen", "win_chance": 0.7, "status": "inactive"},
            ]
        )
        return created, await store.list_active_prizes()

    created, active = run_store(scenario)

    assert len(created) == 2
    assert [prize.prize_label for prize in active] == ["mug"]


def test_reset_drops_everything(run_store) -> None:
    async def scenario(store):
        await store.create_campaign({"content": "x", "quantity": 1, "status": "active"})
        await store.insert_voucher({"username": "kim", "value": "x"})
        await store.create_referral_reward({"content": "gift", "status": "active"})
        await store.reset()
        return (
            await store.list_campaigns(),
            await store.list_vouchers(),
            await store.list_referral_rewards(),
        )

    assert run_store(scenario) == ([], [], [])


def test_delete_with_malformed_id_reports_missing(run_store) -> None:
    async def scenario(store):
        return (
            await store.delete_campaign("not-an-id"),
            await store.delete_referral_reward(None),
            await store.get_campaign("not-an-id"),
        )

    assert run_store(scenario) == (False, False, None)
