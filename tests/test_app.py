from sqlmodel import func, select

from cardloom.models.card import Card, CardSet
from cardloom.utils.seed_data import load_catalog_from_json, seed_catalog


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert data["environment"] == "local"
    assert "timestamp" in data


async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Not Found"}


async def test_validation_error_lists_fields(client):
    response = await client.post("/api/auth/login", json={"password": "x"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    assert "email is required" in body["detail"]


def test_seed_file_is_readable():
    catalog = load_catalog_from_json()

    assert {s["code"] for s in catalog["sets"]} >= {"BS", "AL", "LOB"}
    assert any(c["name"] == "Black Lotus" for c in catalog["cards"])


async def test_seed_catalog_is_idempotent(session):
    await seed_catalog(session)
    first_sets = (await session.execute(select(func.count()).select_from(CardSet))).scalar()
    first_cards = (await session.execute(select(func.count()).select_from(Card))).scalar()

    await seed_catalog(session)
    assert (await session.execute(select(func.count()).select_from(CardSet))).scalar() == first_sets
    assert (await session.execute(select(func.count()).select_from(Card))).scalar() == first_cards
    assert first_cards == len(load_catalog_from_json()["cards"])


async def test_seeded_cards_are_searchable(client, session):
    await seed_catalog(session)

    response = await client.get("/api/cards", params={"search": "black lotus"})
    data = response.json()["data"]
    assert len(data) == 1
    assert data[0]["game"] == "mtg"
    assert data[0]["full_name"].startswith("Black Lotus (AL ")
