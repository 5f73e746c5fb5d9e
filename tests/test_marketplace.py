import pytest_asyncio

from conftest import register


async def create_listing(client, headers, card_id, **overrides):
    payload = {
        "card_id": card_id,
        "title": "Base Set Charizard",
        "price": 50.0,
        "condition": "near_mint",
        **overrides,
    }
    response = await client.post("/api/marketplace/listings", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest_asyncio.fixture
async def listing(client, alice, charizard):
    return await create_listing(client, alice["headers"], charizard.card_id)


async def test_create_listing(client, alice, charizard):
    data = await create_listing(client, alice["headers"], charizard.card_id, currency="eur", shipping={
        "free_shipping": True, "ships_to": ["DE", "FR"],
    })

    assert data["status"] == "active"
    assert data["seller_id"] == alice["user"]["user_id"]
    assert data["currency"] == "EUR"
    assert data["shipping"]["ships_to"] == ["DE", "FR"]


async def test_sale_listing_requires_price(client, alice, charizard):
    response = await client.post("/api/marketplace/listings", headers=alice["headers"], json={
        "card_id": charizard.card_id, "title": "No price", "condition": "mint", "listing_type": "sale",
    })
    assert response.status_code == 400

    response = await client.post("/api/marketplace/listings", headers=alice["headers"], json={
        "card_id": charizard.card_id, "title": "Trade only", "condition": "mint", "listing_type": "trade",
    })
    assert response.status_code == 201
    assert response.json()["data"]["price"] is None


async def test_listing_unknown_card(client, alice):
    response = await client.post("/api/marketplace/listings", headers=alice["headers"], json={
        "card_id": 404, "title": "Ghost", "price": 1, "condition": "mint",
    })
    assert response.status_code == 404


async def test_search_listings(client, alice, bob, charizard, black_lotus):
    await create_listing(client, alice["headers"], charizard.card_id, price=50)
    await create_listing(client, bob["headers"], charizard.card_id, title="Cheap Charizard", price=30)
    await create_listing(client, bob["headers"], black_lotus.card_id, title="Black Lotus", price=20000)

    response = await client.get("/api/marketplace/listings", params={"game": "pokemon", "sort": "price", "order": "asc"})
    body = response.json()
    assert [x["price"] for x in body["data"]] == [30.0, 50.0]
    assert body["pagination"]["total"] == 2

    response = await client.get("/api/marketplace/listings", params={"search": "lotus"})
    assert [x["title"] for x in response.json()["data"]] == ["Black Lotus"]

    response = await client.get(f"/api/marketplace/user/{bob['user']['user_id']}/listings")
    assert len(response.json()["data"]) == 2


async def test_update_and_delete_listing_owner_only(client, alice, bob, listing):
    listing_id = listing["listing_id"]

    response = await client.put(f"/api/marketplace/listings/{listing_id}", headers=bob["headers"], json={"price": 1})
    assert response.status_code == 403

    response = await client.put(f"/api/marketplace/listings/{listing_id}", headers=alice["headers"], json={"price": 42})
    assert response.status_code == 200
    assert response.json()["data"]["price"] == 42.0

    response = await client.delete(f"/api/marketplace/listings/{listing_id}", headers=bob["headers"])
    assert response.status_code == 403

    response = await client.delete(f"/api/marketplace/listings/{listing_id}", headers=alice["headers"])
    assert response.status_code == 200

    response = await client.get(f"/api/marketplace/listings/{listing_id}")
    assert response.status_code == 404


async def test_update_listing_ignores_nulls_for_required_fields(client, alice, listing):
    listing_id = listing["listing_id"]

    for body in ({"listing_type": None}, {"title": None}, {"quantity": None}, {"condition": None}):
        response = await client.put(f"/api/marketplace/listings/{listing_id}", headers=alice["headers"], json=body)
        assert response.status_code == 200, response.text

    data = response.json()["data"]
    assert data["listing_type"] == "sale"
    assert data["title"] == "Base Set Charizard"
    assert data["quantity"] == 1
    assert data["condition"] == "near_mint"


async def test_partial_listing_update_keeps_other_fields(client, alice, listing):
    listing_id = listing["listing_id"]

    response = await client.put(f"/api/marketplace/listings/{listing_id}", headers=alice["headers"], json={
        "description": "Light edge wear",
    })
    data = response.json()["data"]
    assert data["description"] == "Light edge wear"
    assert data["price"] == 50.0

    # 판매 등록의 가격은 비울 수 없음
    response = await client.put(f"/api/marketplace/listings/{listing_id}", headers=alice["headers"], json={
        "price": None,
    })
    assert response.status_code == 400

    # 교환 전용으로 바꾸면 가격 없이도 가능
    response = await client.put(f"/api/marketplace/listings/{listing_id}", headers=alice["headers"], json={
        "listing_type": "trade", "price": None, "description": None,
    })
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["listing_type"] == "trade"
    assert data["price"] is None
    assert data["description"] is None


async def test_search_listings_rejects_inverted_price_range(client):
    response = await client.get("/api/marketplace/listings", params={"price_min": 100, "price_max": 10})
    assert response.status_code == 400
    assert response.json()["error"] == "price_min cannot be greater than price_max"


async def test_cannot_offer_on_own_listing(client, alice, listing):
    response = await client.post(
        f"/api/marketplace/listings/{listing['listing_id']}/offers", headers=alice["headers"], json={"amount": 40})
    assert response.status_code == 400


async def test_offer_notifies_seller(client, alice, bob, listing):
    response = await client.post(
        f"/api/marketplace/listings/{listing['listing_id']}/offers", headers=bob["headers"], json={"amount": 40})
    assert response.status_code == 201
    assert response.json()["data"]["status"] == "pending"

    response = await client.get("/api/notifications", headers=alice["headers"])
    notifications = response.json()["data"]["notifications"]
    assert [n["type"] for n in notifications] == ["new_offer"]


async def test_sale_offer_needs_amount(client, bob, listing):
    response = await client.post(
        f"/api/marketplace/listings/{listing['listing_id']}/offers", headers=bob["headers"], json={"message": "hi"})
    assert response.status_code == 400


async def test_only_seller_sees_listing_offers(client, alice, bob, listing):
    url = f"/api/marketplace/listings/{listing['listing_id']}/offers"
    await client.post(url, headers=bob["headers"], json={"amount": 40})

    assert (await client.get(url, headers=bob["headers"])).status_code == 403
    response = await client.get(url, headers=alice["headers"])
    assert len(response.json()["data"]) == 1

    response = await client.get("/api/marketplace/offers", headers=bob["headers"])
    assert len(response.json()["data"]) == 1


async def test_accept_offer_creates_transaction(client, alice, bob, listing):
    carol = await register_carol(client)
    url = f"/api/marketplace/listings/{listing['listing_id']}/offers"
    offer = (await client.post(url, headers=bob["headers"], json={"amount": 45})).json()["data"]
    other = (await client.post(url, headers=carol["headers"], json={"amount": 44})).json()["data"]

    response = await client.put(
        f"/api/marketplace/offers/{offer['offer_id']}", headers=bob["headers"], json={"status": "accepted"})
    assert response.status_code == 403

    response = await client.put(
        f"/api/marketplace/offers/{offer['offer_id']}", headers=alice["headers"], json={"status": "accepted"})
    assert response.status_code == 200
    decision = response.json()["data"]
    assert decision["offer"]["status"] == "accepted"
    transaction = decision["transaction"]
    assert transaction["status"] == "pending_payment"
    assert transaction["amount"] == 45.0
    assert transaction["buyer_id"] == bob["user"]["user_id"]

    listing_now = (await client.get(f"/api/marketplace/listings/{listing['listing_id']}")).json()["data"]
    assert listing_now["status"] == "sold"
    assert listing_now["quantity"] == 0

    # 다른 미결 제안은 자동 거절
    response = await client.put(
        f"/api/marketplace/offers/{other['offer_id']}", headers=alice["headers"], json={"status": "accepted"})
    assert response.status_code == 400

    response = await client.get("/api/notifications", headers=bob["headers"])
    assert response.json()["data"]["notifications"][0]["type"] == "offer_response"


async def test_counter_then_accept_uses_counter_amount(client, alice, bob, listing):
    url = f"/api/marketplace/listings/{listing['listing_id']}/offers"
    offer = (await client.post(url, headers=bob["headers"], json={"amount": 30})).json()["data"]

    response = await client.put(
        f"/api/marketplace/offers/{offer['offer_id']}", headers=alice["headers"], json={"status": "countered"})
    assert response.status_code == 400

    response = await client.put(
        f"/api/marketplace/offers/{offer['offer_id']}", headers=alice["headers"],
        json={"status": "countered", "counter_amount": 40})
    assert response.json()["data"]["offer"]["counter_amount"] == 40.0

    response = await client.put(
        f"/api/marketplace/offers/{offer['offer_id']}", headers=alice["headers"], json={"status": "accepted"})
    assert response.json()["data"]["transaction"]["amount"] == 40.0


async def test_declined_offer_is_final(client, alice, bob, listing):
    url = f"/api/marketplace/listings/{listing['listing_id']}/offers"
    offer = (await client.post(url, headers=bob["headers"], json={"amount": 30})).json()["data"]

    response = await client.put(
        f"/api/marketplace/offers/{offer['offer_id']}", headers=alice["headers"], json={"status": "declined"})
    assert response.json()["data"]["transaction"] is None

    response = await client.put(
        f"/api/marketplace/offers/{offer['offer_id']}", headers=alice["headers"], json={"status": "accepted"})
    assert response.status_code == 400
    assert response.json()["error"] == "Offer has already been declined"


async def accept_offer(client, seller, buyer, listing_id, amount=45):
    url = f"/api/marketplace/listings/{listing_id}/offers"
    offer = (await client.post(url, headers=buyer["headers"], json={"amount": amount})).json()["data"]
    response = await client.put(
        f"/api/marketplace/offers/{offer['offer_id']}", headers=seller["headers"], json={"status": "accepted"})
    return response.json()["data"]["transaction"]


async def register_carol(client):
    return await register(client, "carol")


async def test_transaction_lifecycle_and_reviews(client, alice, bob, listing):
    transaction = await accept_offer(client, alice, bob, listing["listing_id"])
    url = f"/api/marketplace/transactions/{transaction['transaction_id']}"

    response = await client.post(f"{url}/review", headers=bob["headers"], json={"rating": 5})
    assert response.status_code == 400

    response = await client.put(f"{url}/status", headers=bob["headers"], json={"status": "shipped"})
    assert response.status_code == 400
    assert response.json()["error"] == "Cannot move a transaction from pending_payment to shipped"

    for new_status in ("paid", "shipped", "delivered", "completed"):
        response = await client.put(f"{url}/status", headers=alice["headers"], json={"status": new_status})
        assert response.status_code == 200
        assert response.json()["data"]["status"] == new_status

    response = await client.put(f"{url}/status", headers=alice["headers"], json={"status": "cancelled"})
    assert response.status_code == 400

    profile = (await client.get(f"/api/users/{alice['user']['user_id']}")).json()["data"]
    assert profile["trading_stats"]["total_trades"] == 1
    assert profile["trading_stats"]["successful_trades"] == 1

    response = await client.post(f"{url}/review", headers=bob["headers"], json={"rating": 4, "comment": "Fast"})
    assert response.status_code == 201
    assert response.json()["data"]["reviewee_id"] == alice["user"]["user_id"]

    response = await client.post(f"{url}/review", headers=bob["headers"], json={"rating": 5})
    assert response.status_code == 400

    profile = (await client.get(f"/api/users/{alice['user']['user_id']}")).json()["data"]
    assert profile["trading_stats"]["seller_rating"] == 4.0
    assert profile["trading_stats"]["review_count"] == 1

    reviews = (await client.get(f"/api/users/{alice['user']['user_id']}/reviews")).json()
    assert reviews["pagination"]["total"] == 1
    assert reviews["data"][0]["comment"] == "Fast"


async def test_transaction_access_limited_to_participants(client, alice, bob, listing):
    transaction = await accept_offer(client, alice, bob, listing["listing_id"])
    carol = await register_carol(client)

    response = await client.put(
        f"/api/marketplace/transactions/{transaction['transaction_id']}/status",
        headers=carol["headers"], json={"status": "paid"})
    assert response.status_code == 403

    response = await client.get("/api/marketplace/transactions", headers=bob["headers"])
    assert [t["transaction_id"] for t in response.json()["data"]] == [transaction["transaction_id"]]

    response = await client.get("/api/marketplace/transactions", headers=carol["headers"])
    assert response.json()["data"] == []


async def test_cancel_pending_transaction(client, alice, bob, listing):
    transaction = await accept_offer(client, alice, bob, listing["listing_id"])

    response = await client.put(
        f"/api/marketplace/transactions/{transaction['transaction_id']}/status",
        headers=bob["headers"], json={"status": "cancelled"})
    assert response.status_code == 200

    response = await client.get("/api/marketplace/transactions", headers=bob["headers"], params={"status": "cancelled"})
    assert len(response.json()["data"]) == 1
