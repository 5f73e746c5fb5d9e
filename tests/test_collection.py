async def test_collection_requires_auth(client):
    response = await client.get("/api/collection")
    assert response.status_code == 401


async def test_add_card_then_increment_quantity(client, alice, charizard):
    payload = {"card_id": charizard.card_id, "quantity": 2, "condition": "near_mint", "purchase_price": 40}

    response = await client.post("/api/collection", headers=alice["headers"], json=payload)
    assert response.status_code == 201
    item = response.json()["data"]
    assert item["quantity"] == 2
    assert item["card"]["name"] == "Charizard"

    response = await client.post("/api/collection", headers=alice["headers"], json={**payload, "quantity": 1})
    assert response.status_code == 200
    again = response.json()["data"]
    assert again["item_id"] == item["item_id"]
    assert again["quantity"] == 3


async def test_foil_and_condition_are_separate_entries(client, alice, charizard):
    base = {"card_id": charizard.card_id}
    await client.post("/api/collection", headers=alice["headers"], json=base)
    foil = await client.post("/api/collection", headers=alice["headers"], json={**base, "is_foil": True})
    played = await client.post("/api/collection", headers=alice["headers"], json={**base, "condition": "lightly_played"})

    assert foil.status_code == 201
    assert played.status_code == 201

    response = await client.get("/api/collection", headers=alice["headers"])
    assert len(response.json()["data"]["items"]) == 3


async def test_add_unknown_card(client, alice):
    response = await client.post("/api/collection", headers=alice["headers"], json={"card_id": 999})
    assert response.status_code == 404


async def test_add_rejects_zero_quantity(client, alice, charizard):
    response = await client.post("/api/collection", headers=alice["headers"], json={
        "card_id": charizard.card_id, "quantity": 0,
    })
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


async def test_collection_summary(client, alice, charizard, pikachu, black_lotus):
    await client.post("/api/collection", headers=alice["headers"], json={
        "card_id": charizard.card_id, "quantity": 2, "purchase_price": 40,
    })
    await client.post("/api/collection", headers=alice["headers"], json={
        "card_id": pikachu.card_id, "quantity": 4,
    })

    response = await client.get("/api/collection", headers=alice["headers"])
    summary = response.json()["data"]["summary"]

    assert summary == {
        "total_items": 6,
        "unique_cards": 2,
        "total_value": 80.0,
        "market_value": 101.98,
    }


async def test_collection_filters(client, alice, charizard, black_lotus):
    await client.post("/api/collection", headers=alice["headers"], json={"card_id": charizard.card_id})
    await client.post("/api/collection", headers=alice["headers"], json={"card_id": black_lotus.card_id})

    response = await client.get("/api/collection", headers=alice["headers"], params={"game": "mtg"})
    assert [i["card"]["name"] for i in response.json()["data"]["items"]] == ["Black Lotus"]

    response = await client.get("/api/collection", headers=alice["headers"], params={"search": "lotus"})
    assert [i["card"]["name"] for i in response.json()["data"]["items"]] == ["Black Lotus"]


async def test_collection_is_private_to_owner(client, alice, bob, charizard):
    await client.post("/api/collection", headers=alice["headers"], json={"card_id": charizard.card_id})

    response = await client.get("/api/collection", headers=bob["headers"])
    assert response.json()["data"]["items"] == []


async def test_update_and_delete_item(client, alice, bob, charizard):
    response = await client.post("/api/collection", headers=alice["headers"], json={"card_id": charizard.card_id})
    item_id = response.json()["data"]["item_id"]

    response = await client.put(f"/api/collection/{item_id}", headers=bob["headers"], json={"quantity": 5})
    assert response.status_code == 403

    response = await client.put(f"/api/collection/{item_id}", headers=alice["headers"], json={
        "quantity": 5, "notes": "PSA 9",
    })
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["quantity"] == 5
    assert data["notes"] == "PSA 9"

    response = await client.delete(f"/api/collection/{item_id}", headers=bob["headers"])
    assert response.status_code == 403

    response = await client.delete(f"/api/collection/{item_id}", headers=alice["headers"])
    assert response.status_code == 200

    response = await client.delete(f"/api/collection/{item_id}", headers=alice["headers"])
    assert response.status_code == 404


async def test_update_item_ignores_nulls_for_identity_fields(client, alice, charizard):
    response = await client.post("/api/collection", headers=alice["headers"], json={
        "card_id": charizard.card_id, "condition": "mint", "is_foil": True, "purchase_price": 30, "notes": "Binder",
    })
    item_id = response.json()["data"]["item_id"]

    response = await client.put(f"/api/collection/{item_id}", headers=alice["headers"], json={
        "condition": None, "is_foil": None, "quantity": None,
    })
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["condition"] == "mint"
    assert data["is_foil"] is True
    assert data["quantity"] == 1

    # 매입가와 메모는 비울 수 있음
    response = await client.put(f"/api/collection/{item_id}", headers=alice["headers"], json={
        "purchase_price": None, "notes": None,
    })
    data = response.json()["data"]
    assert data["purchase_price"] is None
    assert data["notes"] is None


async def test_deleted_item_can_be_added_again(client, alice, charizard):
    response = await client.post("/api/collection", headers=alice["headers"], json={
        "card_id": charizard.card_id, "quantity": 3,
    })
    item_id = response.json()["data"]["item_id"]
    await client.delete(f"/api/collection/{item_id}", headers=alice["headers"])

    response = await client.post("/api/collection", headers=alice["headers"], json={"card_id": charizard.card_id})
    assert response.status_code == 201
    assert response.json()["data"]["quantity"] == 1
