import pytest_asyncio


@pytest_asyncio.fixture
async def followed(client, alice, bob):
    """bob이 alice를 팔로우 -> alice에게 new_follower 알림"""
    response = await client.post(f"/api/social/follow/{alice['user']['user_id']}", headers=bob["headers"])
    assert response.status_code == 201, response.text


async def list_notifications(client, user, **params):
    response = await client.get("/api/notifications", headers=user["headers"], params=params)
    assert response.status_code == 200
    return response.json()


async def test_notifications_require_auth(client):
    response = await client.get("/api/notifications")
    assert response.status_code == 401


async def test_follow_creates_notification(client, alice, followed):
    body = await list_notifications(client, alice)

    assert body["data"]["unread_count"] == 1
    notification = body["data"]["notifications"][0]
    assert notification["type"] == "new_follower"
    assert notification["is_read"] is False
    assert body["pagination"]["total"] == 1


async def test_mark_read(client, alice, bob, followed):
    notification_id = (await list_notifications(client, alice))["data"]["notifications"][0]["notification_id"]

    response = await client.put(f"/api/notifications/{notification_id}/read", headers=bob["headers"])
    assert response.status_code == 404

    response = await client.put(f"/api/notifications/{notification_id}/read", headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["data"]["is_read"] is True

    body = await list_notifications(client, alice, unread_only=True)
    assert body["data"]["notifications"] == []
    assert body["data"]["unread_count"] == 0


async def test_mark_all_read(client, alice, bob, followed):
    await client.post("/api/social/messages", headers=bob["headers"], json={
        "recipient_id": alice["user"]["user_id"], "content": "Hi!",
    })
    assert (await list_notifications(client, alice))["data"]["unread_count"] == 2

    response = await client.put("/api/notifications/read-all", headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["message"] == "2 notifications marked as read"

    assert (await list_notifications(client, alice))["data"]["unread_count"] == 0


async def test_delete_notification(client, alice, bob, followed):
    notification_id = (await list_notifications(client, alice))["data"]["notifications"][0]["notification_id"]

    response = await client.delete(f"/api/notifications/{notification_id}", headers=bob["headers"])
    assert response.status_code == 404

    response = await client.delete(f"/api/notifications/{notification_id}", headers=alice["headers"])
    assert response.status_code == 200

    assert (await list_notifications(client, alice))["data"]["notifications"] == []


async def test_disabled_notification_type_is_not_created(client, alice, bob):
    await client.put("/api/users/profile", headers=alice["headers"], json={
        "preferences": {"notifications": {"followers": False}},
    })
    await client.post(f"/api/social/follow/{alice['user']['user_id']}", headers=bob["headers"])

    body = await list_notifications(client, alice)
    assert body["data"]["notifications"] == []
