import pytest_asyncio

from conftest import make_card


def deck_payload(**overrides):
    payload = {
        "game": "pokemon",
        "title": "Charizard Blaze",
        "format": "Standard",
        "is_public": True,
        "tags": ["fire", "aggro"],
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def deck(client, alice):
    response = await client.post("/api/decks", headers=alice["headers"], json=deck_payload())
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_create_deck(client, alice, deck):
    assert deck["user_id"] == alice["user"]["user_id"]
    assert deck["cards"] == []
    assert deck["card_count"] == 0
    assert deck["tags"] == ["fire", "aggro"]


async def test_private_deck_visibility(client, alice, bob):
    response = await client.post("/api/decks", headers=alice["headers"], json=deck_payload(is_public=False))
    deck_id = response.json()["data"]["deck_id"]

    assert (await client.get(f"/api/decks/{deck_id}")).status_code == 404
    assert (await client.get(f"/api/decks/{deck_id}", headers=bob["headers"])).status_code == 404
    assert (await client.get(f"/api/decks/{deck_id}", headers=alice["headers"])).status_code == 200

    public = (await client.get("/api/decks")).json()
    assert public["data"] == []

    mine = (await client.get("/api/decks/mine", headers=alice["headers"])).json()
    assert [d["deck_id"] for d in mine["data"]] == [deck_id]


async def test_list_public_decks_filters(client, alice, bob, deck):
    await client.post("/api/decks", headers=bob["headers"], json=deck_payload(
        game="mtg", title="Mono Red Burn", format="Modern"))

    response = await client.get("/api/decks", params={"game": "mtg"})
    assert [d["title"] for d in response.json()["data"]] == ["Mono Red Burn"]

    response = await client.get("/api/decks", params={"format": "modern"})
    assert [d["title"] for d in response.json()["data"]] == ["Mono Red Burn"]

    response = await client.get("/api/decks", params={"search": "blaze"})
    assert [d["title"] for d in response.json()["data"]] == ["Charizard Blaze"]


async def test_update_and_delete_owner_only(client, alice, bob, deck):
    url = f"/api/decks/{deck['deck_id']}"

    assert (await client.put(url, headers=bob["headers"], json={"title": "Mine now"})).status_code == 403

    response = await client.put(url, headers=alice["headers"], json={"title": "Charizard Inferno", "is_public": False})
    assert response.status_code == 200
    assert response.json()["data"]["title"] == "Charizard Inferno"
    assert response.json()["data"]["is_public"] is False

    assert (await client.delete(url, headers=bob["headers"])).status_code == 403
    assert (await client.delete(url, headers=alice["headers"])).status_code == 200
    assert (await client.get(url, headers=alice["headers"])).status_code == 404


async def test_add_cards_and_change_quantity(client, alice, deck, charizard, pikachu):
    url = f"/api/decks/{deck['deck_id']}/cards"

    response = await client.post(url, headers=alice["headers"], json={"card_id": charizard.card_id, "quantity": 2})
    assert response.status_code == 200
    await client.post(url, headers=alice["headers"], json={"card_id": pikachu.card_id, "quantity": 4})
    response = await client.post(url, headers=alice["headers"], json={"card_id": charizard.card_id, "quantity": 1})

    data = response.json()["data"]
    quantities = {e["card"]["name"]: e["quantity"] for e in data["cards"]}
    assert quantities == {"Charizard": 3, "Pikachu": 4}
    assert data["card_count"] == 7

    response = await client.put(f"{url}/{pikachu.card_id}", headers=alice["headers"], json={"quantity": 2})
    assert response.json()["data"]["card_count"] == 5

    response = await client.put(f"{url}/{pikachu.card_id}", headers=alice["headers"], json={"quantity": 0})
    assert [e["card"]["name"] for e in response.json()["data"]["cards"]] == ["Charizard"]

    response = await client.put(f"{url}/{pikachu.card_id}", headers=alice["headers"], json={"quantity": 1})
    assert response.status_code == 404
    assert response.json()["error"] == "Card is not in this deck"

    response = await client.delete(f"{url}/{charizard.card_id}", headers=alice["headers"])
    assert response.json()["data"]["cards"] == []

    listed = (await client.get("/api/decks/mine", headers=alice["headers"])).json()["data"]
    assert listed[0]["card_count"] == 0


async def test_card_must_match_deck_game(client, alice, deck, black_lotus):
    response = await client.post(f"/api/decks/{deck['deck_id']}/cards", headers=alice["headers"], json={
        "card_id": black_lotus.card_id,
    })
    assert response.status_code == 400
    assert response.json()["error"] == "Card does not belong to the deck's game"


async def test_other_users_cannot_edit_cards(client, bob, deck, charizard):
    response = await client.post(f"/api/decks/{deck['deck_id']}/cards", headers=bob["headers"], json={
        "card_id": charizard.card_id,
    })
    assert response.status_code == 403


async def test_duplicate_public_deck_notifies_owner(client, alice, bob, deck, charizard):
    await client.post(f"/api/decks/{deck['deck_id']}/cards", headers=alice["headers"], json={
        "card_id": charizard.card_id, "quantity": 3,
    })

    response = await client.post(f"/api/decks/{deck['deck_id']}/duplicate", headers=bob["headers"], json={
        "title": "Borrowed Blaze",
    })
    assert response.status_code == 201
    copy_ = response.json()["data"]
    assert copy_["user_id"] == bob["user"]["user_id"]
    assert copy_["is_public"] is False
    assert copy_["card_count"] == 3

    notifications = (await client.get("/api/notifications", headers=alice["headers"])).json()["data"]["notifications"]
    assert [n["type"] for n in notifications] == ["deck_engagement"]


async def test_cannot_duplicate_private_deck_of_others(client, alice, bob):
    response = await client.post("/api/decks", headers=alice["headers"], json=deck_payload(is_public=False))
    deck_id = response.json()["data"]["deck_id"]

    response = await client.post(f"/api/decks/{deck_id}/duplicate", headers=bob["headers"], json={"title": "Nope"})
    assert response.status_code == 404


async def test_deck_analysis_endpoint(client, session, alice, deck, pokemon_set):
    fire = await make_card(session, pokemon_set, "Charmander", "46", card_type="Pokémon",
                           attributes={"cost": 1, "color": "Fire"})
    energy = await make_card(session, pokemon_set, "Basic Fire Energy", "98", card_type="Energy",
                             attributes={"supertypes": ["Energy"]})
    url = f"/api/decks/{deck['deck_id']}/cards"
    await client.post(url, headers=alice["headers"], json={"card_id": fire.card_id, "quantity": 4})
    await client.post(url, headers=alice["headers"], json={"card_id": energy.card_id, "quantity": 20})

    response = await client.get(f"/api/decks/{deck['deck_id']}/analysis")
    assert response.status_code == 200
    analysis = response.json()["data"]
    assert analysis["deck_id"] == deck["deck_id"]
    assert analysis["total_cards"] == 24
    assert analysis["color_distribution"] == {"Fire": 4, "Colorless": 20}
    assert analysis["mana_curve"]["1"] == 4
    assert analysis["legality"] == {
        "is_legal": False,
        "issues": ["Deck must contain exactly 60 cards (currently 24)"],
    }
