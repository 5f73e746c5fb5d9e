from conftest import register


async def test_get_own_profile(client, alice):
    response = await client.get("/api/users/profile", headers=alice["headers"])

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "alice"
    assert data["trading_stats"] == {
        "total_trades": 0,
        "seller_rating": 0.0,
        "review_count": 0,
        "successful_trades": 0,
    }


async def test_update_profile_merges_preferences(client, alice):
    response = await client.put("/api/users/profile", headers=alice["headers"], json={
        "bio": "Collector since 1999",
        "preferences": {"theme": "dark", "notifications": {"marketing": True}},
    })

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["bio"] == "Collector since 1999"
    prefs = data["preferences"]
    assert prefs["theme"] == "dark"
    assert prefs["notifications"]["marketing"] is True
    # 기존 값 유지
    assert prefs["notifications"]["offers"] is True
    assert prefs["currency"] == "USD"


async def test_change_password(client, alice):
    response = await client.put("/api/users/password", headers=alice["headers"], json={
        "current_password": "wrong-password",
        "new_password": "newpassword1",
    })
    assert response.status_code == 400

    response = await client.put("/api/users/password", headers=alice["headers"], json={
        "current_password": "password123",
        "new_password": "newpassword1",
    })
    assert response.status_code == 200

    login = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "newpassword1"})
    assert login.status_code == 200


async def test_public_profile(client, alice, bob):
    response = await client.get(f"/api/users/{alice['user']['user_id']}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "alice"
    assert "email" not in data
    assert data["member_since"] is not None


async def test_public_profile_missing_user(client):
    response = await client.get("/api/users/9999")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "User not found"}


async def test_delete_account_hides_profile(client, alice):
    response = await client.delete("/api/users/profile", headers=alice["headers"])
    assert response.status_code == 200

    response = await client.get(f"/api/users/{alice['user']['user_id']}")
    assert response.status_code == 404

    # 탈퇴 계정의 토큰은 더 이상 유효하지 않음
    response = await client.get("/api/users/profile", headers=alice["headers"])
    assert response.status_code == 401


async def test_deleted_email_cannot_be_reused(client, alice):
    await client.delete("/api/users/profile", headers=alice["headers"])

    response = await client.post("/api/auth/register", json={
        "username": "alice_again",
        "display_name": "Alice",
        "email": "alice@example.com",
        "password": "password123",
        "preferred_games": ["pokemon"],
    })
    assert response.status_code == 400


async def test_reviews_list_empty(client, alice):
    response = await client.get(f"/api/users/{alice['user']['user_id']}/reviews")

    assert response.status_code == 200
    body = response.json()
    assert body["data"] == []
    assert body["pagination"] == {"total": 0, "limit": 20, "offset": 0, "has_more": False}


async def test_profile_requires_auth(client):
    await register(client, "carol")
    response = await client.get("/api/users/profile")
    assert response.status_code == 401
