from conftest import make_card, make_set


async def test_search_filters_by_game(client, charizard, pikachu, black_lotus):
    response = await client.get("/api/cards", params={"game": "pokemon"})

    assert response.status_code == 200
    body = response.json()
    names = [c["name"] for c in body["data"]]
    assert names == ["Charizard", "Pikachu"]
    assert all(c["game"] == "pokemon" for c in body["data"])
    assert body["pagination"]["total"] == 2


async def test_search_is_case_insensitive(client, charizard, pikachu):
    response = await client.get("/api/cards", params={"search": "CHAR"})

    assert [c["name"] for c in response.json()["data"]] == ["Charizard"]


async def test_search_price_range_and_sort(client, charizard, pikachu, black_lotus):
    response = await client.get("/api/cards", params={"price_min": 1, "price_max": 100, "sort": "price", "order": "desc"})

    assert [c["name"] for c in response.json()["data"]] == ["Charizard", "Pikachu"]


async def test_search_rejects_inverted_price_range(client):
    response = await client.get("/api/cards", params={"price_min": 10, "price_max": 1})
    assert response.status_code == 400


async def test_search_sort_by_rarity(client, session, pokemon_set):
    await make_card(session, pokemon_set, "Common Card", "10", "common")
    await make_card(session, pokemon_set, "Secret Card", "11", "secret_rare")
    await make_card(session, pokemon_set, "Rare Card", "12", "rare")

    response = await client.get("/api/cards", params={"sort": "rarity", "order": "asc"})

    assert [c["rarity"] for c in response.json()["data"]] == ["common", "rare", "secret_rare"]


async def test_search_excludes_inactive_cards(client, session, pokemon_set, charizard):
    await make_card(session, pokemon_set, "Retired", "99", is_active=False)

    response = await client.get("/api/cards")
    assert [c["name"] for c in response.json()["data"]] == ["Charizard"]


async def test_pagination(client, session, pokemon_set):
    for i in range(5):
        await make_card(session, pokemon_set, f"Card {i}", str(i))

    response = await client.get("/api/cards", params={"limit": 2, "offset": 2})

    body = response.json()
    assert [c["name"] for c in body["data"]] == ["Card 2", "Card 3"]
    assert body["pagination"] == {"total": 5, "limit": 2, "offset": 2, "has_more": True}


async def test_invalid_limit_rejected(client):
    response = await client.get("/api/cards", params={"limit": 0})
    assert response.status_code == 400


async def test_get_card_detail_with_computed_fields(client, charizard):
    response = await client.get(f"/api/cards/{charizard.card_id}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["full_name"] == "Charizard (BS 4)"
    assert data["display_rarity"] == "HOLO RARE"
    assert data["market_price"] == 45.99


async def test_get_card_missing(client):
    response = await client.get("/api/cards/12345")

    assert response.status_code == 404
    assert response.json()["error"] == "Card not found"


async def test_list_sets_ordered_by_release_date(client, pokemon_set, mtg_set):
    response = await client.get("/api/cards/sets")
    assert [s["code"] for s in response.json()["data"]] == ["AL", "BS"]

    response = await client.get("/api/cards/sets", params={"game": "pokemon"})
    assert [s["code"] for s in response.json()["data"]] == ["BS"]


async def test_create_set_and_card_requires_admin(client, alice):
    payload = {"game": "lorcana", "name": "The First Chapter", "code": "tfc", "release_date": "2023-08-18"}

    response = await client.post("/api/cards/sets", json=payload)
    assert response.status_code == 401

    response = await client.post("/api/cards/sets", headers=alice["headers"], json=payload)
    assert response.status_code == 403


async def test_admin_creates_set_and_card(client, admin):
    payload = {"game": "lorcana", "name": "The First Chapter", "code": "tfc", "release_date": "2023-08-18"}
    response = await client.post("/api/cards/sets", headers=admin["headers"], json=payload)

    assert response.status_code == 201
    card_set = response.json()["data"]
    assert card_set["code"] == "TFC"

    duplicate = await client.post("/api/cards/sets", headers=admin["headers"], json=payload)
    assert duplicate.status_code == 400

    response = await client.post("/api/cards", headers=admin["headers"], json={
        "game": "lorcana",
        "set_id": card_set["set_id"],
        "name": "Mickey Mouse",
        "number": "1",
        "rarity": "legendary",
        "image_url": "https://example.com/mickey.jpg",
        "market_price": 12.5,
    })
    assert response.status_code == 201
    assert response.json()["data"]["full_name"] == "Mickey Mouse (TFC 1)"


async def test_create_card_game_must_match_set(client, admin, session):
    card_set = await make_set(session, "yugioh", "LOB")

    response = await client.post("/api/cards", headers=admin["headers"], json={
        "game": "mtg",
        "set_id": card_set.set_id,
        "name": "Wrong Game",
        "number": "1",
        "rarity": "rare",
        "image_url": "https://example.com/x.jpg",
    })
    assert response.status_code == 400

    response = await client.post("/api/cards", headers=admin["headers"], json={
        "game": "mtg",
        "set_id": 9999,
        "name": "No Set",
        "number": "1",
        "rarity": "rare",
        "image_url": "https://example.com/x.jpg",
    })
    assert response.status_code == 400
