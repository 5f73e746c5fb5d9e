from conftest import register


async def test_follow_and_unfollow(client, alice, bob):
    alice_id = alice["user"]["user_id"]

    response = await client.post(f"/api/social/follow/{alice_id}", headers=bob["headers"])
    assert response.status_code == 201
    assert response.json()["data"]["status"] == "active"

    response = await client.post(f"/api/social/follow/{alice_id}", headers=bob["headers"])
    assert response.status_code == 400
    assert response.json()["error"] == "Already following this user"

    followers = (await client.get(f"/api/social/users/{alice_id}/followers")).json()
    assert [u["username"] for u in followers["data"]] == ["bob"]
    following = (await client.get(f"/api/social/users/{bob['user']['user_id']}/following")).json()
    assert [u["username"] for u in following["data"]] == ["alice"]

    response = await client.delete(f"/api/social/follow/{alice_id}", headers=bob["headers"])
    assert response.status_code == 200

    response = await client.delete(f"/api/social/follow/{alice_id}", headers=bob["headers"])
    assert response.status_code == 404


async def test_follow_rules(client, alice):
    response = await client.post(f"/api/social/follow/{alice['user']['user_id']}", headers=alice["headers"])
    assert response.status_code == 400
    assert response.json()["error"] == "You cannot follow yourself"

    response = await client.post("/api/social/follow/9999", headers=alice["headers"])
    assert response.status_code == 404


async def test_feed_includes_self_and_followed_users(client, alice, bob):
    carol = await register(client, "carol")
    await client.post(f"/api/social/follow/{bob['user']['user_id']}", headers=alice["headers"])

    for user, text in ((alice, "alice post"), (bob, "bob post"), (carol, "carol post")):
        response = await client.post("/api/social/posts", headers=user["headers"], json={"content": text})
        assert response.status_code == 201

    feed = (await client.get("/api/social/feed", headers=alice["headers"])).json()
    assert [p["content"] for p in feed["data"]] == ["bob post", "alice post"]
    assert feed["pagination"]["total"] == 2

    everything = (await client.get("/api/social/posts")).json()
    assert everything["pagination"]["total"] == 3

    by_carol = (await client.get("/api/social/posts", params={"author_id": carol["user"]["user_id"]})).json()
    assert [p["content"] for p in by_carol["data"]] == ["carol post"]


async def test_post_with_missing_related_deck(client, alice):
    response = await client.post("/api/social/posts", headers=alice["headers"], json={
        "content": "My new deck", "related_deck_id": 77,
    })
    assert response.status_code == 404


async def test_like_and_delete_post(client, alice, bob):
    post = (await client.post("/api/social/posts", headers=alice["headers"], json={"content": "Pulled a Charizard!"})).json()["data"]
    assert post["likes"] == 0

    response = await client.post(f"/api/social/posts/{post['post_id']}/like", headers=bob["headers"])
    assert response.json()["data"]["likes"] == 1

    response = await client.delete(f"/api/social/posts/{post['post_id']}", headers=bob["headers"])
    assert response.status_code == 403

    response = await client.delete(f"/api/social/posts/{post['post_id']}", headers=alice["headers"])
    assert response.status_code == 200

    response = await client.get(f"/api/social/posts/{post['post_id']}")
    assert response.status_code == 404


async def test_comments_and_replies(client, alice, bob):
    post = (await client.post("/api/social/posts", headers=alice["headers"], json={"content": "Thoughts?"})).json()["data"]
    other = (await client.post("/api/social/posts", headers=alice["headers"], json={"content": "Other"})).json()["data"]
    url = f"/api/social/posts/{post['post_id']}/comments"

    comment = (await client.post(url, headers=bob["headers"], json={"content": "Nice"})).json()["data"]
    reply = await client.post(url, headers=alice["headers"], json={
        "content": "Thanks", "parent_comment_id": comment["comment_id"],
    })
    assert reply.status_code == 201

    response = await client.post(f"/api/social/posts/{other['post_id']}/comments", headers=bob["headers"], json={
        "content": "Wrong thread", "parent_comment_id": comment["comment_id"],
    })
    assert response.status_code == 400
    assert response.json()["error"] == "Parent comment does not belong to this post"

    comments = (await client.get(url)).json()["data"]
    assert [c["content"] for c in comments] == ["Nice", "Thanks"]
    assert (await client.get(f"/api/social/posts/{post['post_id']}")).json()["data"]["comments"] == 2

    response = await client.delete(f"/api/social/comments/{comment['comment_id']}", headers=alice["headers"])
    assert response.status_code == 403

    response = await client.delete(f"/api/social/comments/{comment['comment_id']}", headers=bob["headers"])
    assert response.status_code == 200
    assert (await client.get(f"/api/social/posts/{post['post_id']}")).json()["data"]["comments"] == 1

    response = await client.delete(f"/api/social/comments/{comment['comment_id']}", headers=bob["headers"])
    assert response.status_code == 404


async def test_messages_share_one_conversation(client, alice, bob):
    first = await client.post("/api/social/messages", headers=alice["headers"], json={
        "recipient_id": bob["user"]["user_id"], "content": "Is the Charizard still available?",
    })
    assert first.status_code == 201
    reply = await client.post("/api/social/messages", headers=bob["headers"], json={
        "recipient_id": alice["user"]["user_id"], "content": "Yes!",
    })
    conversation_id = first.json()["data"]["conversation_id"]
    assert reply.json()["data"]["conversation_id"] == conversation_id

    conversations = (await client.get("/api/social/conversations", headers=alice["headers"])).json()["data"]
    assert len(conversations) == 1
    conversation = conversations[0]
    assert sorted(conversation["participants"]) == sorted([alice["user"]["user_id"], bob["user"]["user_id"]])
    assert conversation["other_user"]["username"] == "bob"
    assert conversation["last_message"]["content"] == "Yes!"
    assert conversation["unread_count"] == 1


async def test_reading_conversation_marks_messages_read(client, alice, bob):
    sent = await client.post("/api/social/messages", headers=alice["headers"], json={
        "recipient_id": bob["user"]["user_id"], "content": "Hello",
    })
    conversation_id = sent.json()["data"]["conversation_id"]

    messages = (await client.get(
        f"/api/social/conversations/{conversation_id}/messages", headers=bob["headers"])).json()
    assert [m["content"] for m in messages["data"]] == ["Hello"]
    assert messages["data"][0]["is_read"] is True

    conversations = (await client.get("/api/social/conversations", headers=bob["headers"])).json()["data"]
    assert conversations[0]["unread_count"] == 0


async def test_conversation_hidden_from_outsiders(client, alice, bob):
    carol = await register(client, "carol")
    sent = await client.post("/api/social/messages", headers=alice["headers"], json={
        "recipient_id": bob["user"]["user_id"], "content": "Private",
    })
    conversation_id = sent.json()["data"]["conversation_id"]

    response = await client.get(f"/api/social/conversations/{conversation_id}/messages", headers=carol["headers"])
    assert response.status_code == 404


async def test_message_rules(client, alice):
    response = await client.post("/api/social/messages", headers=alice["headers"], json={
        "recipient_id": alice["user"]["user_id"], "content": "Note to self",
    })
    assert response.status_code == 400

    response = await client.post("/api/social/messages", headers=alice["headers"], json={
        "recipient_id": 9999, "content": "Hello?",
    })
    assert response.status_code == 404


async def test_conversations_ordered_by_latest_message(client, alice, bob):
    carol = await register(client, "carol")

    with_bob = await client.post("/api/social/messages", headers=bob["headers"], json={
        "recipient_id": alice["user"]["user_id"], "content": "Trade?",
    })
    with_carol = await client.post("/api/social/messages", headers=carol["headers"], json={
        "recipient_id": alice["user"]["user_id"], "content": "Hi alice",
    })
    conversations = (await client.get("/api/social/conversations", headers=alice["headers"])).json()["data"]
    assert [c["conversation_id"] for c in conversations] == [
        with_carol.json()["data"]["conversation_id"],
        with_bob.json()["data"]["conversation_id"],
    ]

    # bob 이 다시 보내면 맨 위로
    await client.post("/api/social/messages", headers=bob["headers"], json={
        "recipient_id": alice["user"]["user_id"], "content": "Still there?",
    })
    conversations = (await client.get("/api/social/conversations", headers=alice["headers"])).json()["data"]
    assert [c["other_user"]["username"] for c in conversations] == ["bob", "carol"]
    assert [c["unread_count"] for c in conversations] == [2, 1]

    # 읽은 대화만 0 으로
    await client.get(f"/api/social/conversations/{with_bob.json()['data']['conversation_id']}/messages",
                     headers=alice["headers"])
    conversations = (await client.get("/api/social/conversations", headers=alice["headers"])).json()["data"]
    assert [c["unread_count"] for c in conversations] == [0, 1]
    assert [c["other_user"]["username"] for c in conversations] == ["bob", "carol"]
