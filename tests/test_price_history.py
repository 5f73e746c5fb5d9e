from datetime import date, timedelta

import pytest

from cardloom.utils.datetime import utc_today
from cardloom.utils.price_calc import generate_price_history, summarize_prices


def test_history_has_one_point_per_day_ending_today():
    today = date(2024, 3, 15)
    points = generate_price_history(card_id=1, base_price=45.99, days=30, today=today)

    assert len(points) == 31
    assert points[0]["date"] == today - timedelta(days=30)
    assert points[-1]["date"] == today
    dates = [p["date"] for p in points]
    assert dates == sorted(dates)


def test_history_is_deterministic_per_card_and_day():
    today = date(2024, 3, 15)

    first = generate_price_history(card_id=7, base_price=20, days=7, today=today)
    second = generate_price_history(card_id=7, base_price=20, days=7, today=today)
    other_card = generate_price_history(card_id=8, base_price=20, days=7, today=today)

    assert first == second
    assert first != other_card


def test_history_prices_and_volumes_in_range():
    points = generate_price_history(card_id=3, base_price=None, days=90, today=date(2024, 1, 1))

    for p in points:
        assert p["price"] >= 0.01
        assert 10 <= p["volume"] <= 109
        # 기준가 10 기준 변동폭 내
        assert p["price"] < 10 * 1.5


def test_summary_of_empty_series():
    assert summarize_prices([]) is None


def test_summary_statistics():
    summary = summarize_prices([10.0, 12.0, 11.0, 13.0])

    assert summary["current_price"] == 13.0
    assert summary["change"] == 2.0
    assert summary["change_percent"] == pytest.approx(18.18, abs=0.01)
    assert summary["min_price"] == 10.0
    assert summary["max_price"] == 13.0
    assert summary["avg_price"] == 11.5
    assert summary["volatility"] == pytest.approx(11.23, abs=0.01)
    assert summary["trend"] == "up"


def test_summary_trend_direction():
    assert summarize_prices([5.0, 4.0])["trend"] == "down"
    assert summarize_prices([5.0, 5.0])["trend"] == "stable"
    single = summarize_prices([5.0])
    assert single["change"] == 0.0
    assert single["volatility"] == 0.0
    assert single["trend"] == "stable"


async def test_price_history_endpoint(client, charizard):
    response = await client.get(f"/api/cards/{charizard.card_id}/price-history", params={"period": "7d"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["period"] == "7d"
    assert len(data["points"]) == 8
    assert data["points"][-1]["date"] == utc_today().isoformat()
    assert data["summary"]["trend"] in {"up", "down", "stable"}

    again = await client.get(f"/api/cards/{charizard.card_id}/price-history", params={"period": "7d"})
    assert again.json()["data"]["points"] == data["points"]


async def test_price_history_defaults_to_thirty_days(client, charizard):
    response = await client.get(f"/api/cards/{charizard.card_id}/price-history")
    assert len(response.json()["data"]["points"]) == 31


async def test_price_history_rejects_unknown_period(client, charizard):
    response = await client.get(f"/api/cards/{charizard.card_id}/price-history", params={"period": "2w"})
    assert response.status_code == 400


async def test_price_history_missing_card(client):
    response = await client.get("/api/cards/999/price-history")
    assert response.status_code == 404
