def test_campaign_crud(client) -> None:
    first = client.post("/api/admin/voucher-campaigns", json={"content": "A", "quantity": 1})
    second = client.post("/api/admin/voucher-campaigns", json={"content": "B", "quantity": 5})
    assert first.json()["success"] is True

    campaigns = client.get("/api/admin/voucher-campaigns").json()
    assert {item["content"] for item in campaigns} == {"A", "B"}
    assert all(item["status"] == "active" for item in campaigns)

    deleted = client.delete(f"/api/admin/voucher-campaigns/{first.json()['id']}")
    assert deleted.json() == {"success": True}
    remaining = client.get("/api/admin/voucher-campaigns").json()
    assert [item["id"] for item in remaining] == [second.json()["id"]]


def test_deleting_missing_campaign_is_not_found(client) -> None:
    response = client.delete("/api/admin/voucher-campaigns/424242")

    assert response.status_code == 404
    assert response.json() == {"error": "Campaign not found"}


def test_campaign_quantity_must_not_be_negative(client) -> None:
    response = client.post("/api/admin/voucher-campaigns", json={"content": "A", "quantity": -1})

    assert response.status_code == 422
    assert client.get("/api/admin/voucher-campaigns").json() == []


def test_spin_wheel_configuration_is_replaced(client) -> None:
    campaign_id = client.post(
        "/api/admin/voucher-campaigns", json={"content": "A", "quantity": 1}
    ).json()["id"]
    client.post(
        "/api/admin/spin-wheel",
        json={"prizes": [{"prize_label": "Old", "win_chance": 0.9}]},
    )

    response = client.post(
        "/api/admin/spin-wheel",
        json={
            "prizes": [
                {"prize_label": "Coffee", "win_chance": 0.5, "campaign_id": campaign_id},
                {"prize_label": "Nothing", "win_chance": 0.4},
                {"prize_label": "Hidden", "win_chance": 0.1, "status": "inactive"},
            ]
        },
    )

    assert response.json() == {"success": True}
    prizes = client.get("/api/admin/spin-wheel").json()
    assert {prize["prize_label"] for prize in prizes} == {"Coffee", "Nothing"}
    coffee = next(prize for prize in prizes if prize["prize_label"] == "Coffee")
    assert coffee["campaign_id"] == campaign_id


def test_spin_wheel_prize_status_toggle(client) -> None:
    client.post(
        "/api/admin/spin-wheel",
        json={"prizes": [{"prize_label": "Coffee", "win_chance": 0.5}]},
    )
    prize_id = client.get("/api/admin/spin-wheel").json()[0]["id"]

    response = client.put(f"/api/admin/spin-wheel/{prize_id}/status", json={"status": "inactive"})

    assert response.json() == {"success": True}
    assert client.get("/api/admin/spin-wheel").json() == []
    missing = client.put("/api/admin/spin-wheel/424242/status", json={"status": "active"})
    assert missing.json() == {"success": False}


def test_referral_rewards(client) -> None:
    created = client.post("/api/admin/referral-reward", json={"content": "5 EUR credit"})
    reward_id = created.json()["id"]

    rewards = client.get("/api/admin/referral-reward").json()
    assert [(item["content"], item["status"]) for item in rewards] == [("5 EUR credit", "active")]

    assert client.delete(f"/api/admin/referral-reward/{reward_id}").json() == {"success": True}
    missing = client.delete(f"/api/admin/referral-reward/{reward_id}")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Reward not found"}


def test_top_referrers_ranking(client) -> None:
    for referrer, referred in [
        ("carol", "u1"),
        ("bob", "u2"),
        ("carol", "u3"),
        ("alice", "u4"),
        ("bob", "u5"),
        ("dave", "u6"),
        ("carol", "u7"),
    ]:
        response = client.post("/api/referrals", json={"referrer": referrer, "referred": referred})
        assert response.json()["success"] is True

    ranking = client.get("/api/top-referrers").json()

    assert ranking == [
        {"referrer": "carol", "referrals": 3},
        {"referrer": "bob", "referrals": 2},
        {"referrer": "alice", "referrals": 1},
        {"referrer": "dave", "referrals": 1},
    ]
    assert len(client.get("/api/admin/referrals").json()) == 7


def test_users_are_collected_from_vouchers_and_referrals(client) -> None:
    client.post("/api/vouchers", json={"username": "alice", "value": "x"})
    client.post("/api/vouchers", json={"username": None, "value": "y"})
    client.post("/api/referrals", json={"referrer": "bob", "referred": "alice"})
    client.post("/api/referrals", json={"referrer": "bob", "referred": "erin"})

    users = client.get("/api/admin/users").json()

    assert sorted(users) == ["alice", "bob", "erin"]


def test_admin_vouchers_list_claimed_first(client) -> None:
    client.post("/api/vouchers", json={"username": "a", "value": "x", "claimedAt": None})
    client.post(
        "/api/vouchers",
        json={"username": "b", "value": "x", "claimedAt": "2025-01-01T00:00:00Z"},
    )
    client.post(
        "/api/vouchers",
        json={"username": "c", "value": "x", "claimedAt": "2025-02-01T00:00:00Z"},
    )

    vouchers = client.get("/api/admin/vouchers").json()

    assert [voucher["username"] for voucher in vouchers] == ["c", "b", "a"]


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}
