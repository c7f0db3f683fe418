"""Tests for video reactions and comment likes"""

import uuid

from sqlalchemy import func, select

from tests.conftest import API, upload_video
from vidtube.models.like import Like


async def _react(client, user, video_id, reaction):
    return await client.post(
        f"{API}/likes/v/{video_id}", json={"reactionType": reaction}, headers=user["headers"]
    )


async def test_like_toggles_on_and_off(client, bob, alice_video):
    r = await client.post(f"{API}/likes/toggle/v/{alice_video['id']}", headers=bob["headers"])
    assert r.status_code == 200
    state = r.json()["data"]
    assert state == {"likeCount": 1, "dislikeCount": 0, "isLiked": True, "isDisliked": False}

    r = await client.post(f"{API}/likes/toggle/v/{alice_video['id']}", headers=bob["headers"])
    state = r.json()["data"]
    assert state == {"likeCount": 0, "dislikeCount": 0, "isLiked": False, "isDisliked": False}


async def test_dislike_replaces_like(client, bob, alice_video, session_maker):
    await _react(client, bob, alice_video["id"], "like")
    r = await _react(client, bob, alice_video["id"], "dislike")
    assert r.status_code == 200
    assert r.json()["data"] == {"likeCount": 0, "dislikeCount": 1, "isLiked": False, "isDisliked": True}

    async with session_maker() as session:
        rows = await session.scalar(
            select(func.count()).select_from(Like).where(Like.video_id == uuid.UUID(alice_video["id"]))
        )
    assert rows == 1


async def test_reaction_counts(client, alice, bob, alice_video):
    await _react(client, alice, alice_video["id"], "like")
    await _react(client, bob, alice_video["id"], "dislike")

    r = await client.get(f"{API}/likes/v/{alice_video['id']}/count", headers=alice["headers"])
    assert r.json()["data"] == {"likeCount": 1, "dislikeCount": 1, "isLiked": True, "isDisliked": False}


async def test_invalid_reaction_type(client, bob, alice_video):
    r = await _react(client, bob, alice_video["id"], "love")
    assert r.status_code == 400


async def test_react_to_missing_video(client, bob):
    r = await _react(client, bob, uuid.uuid4(), "like")
    assert r.status_code == 404


async def test_comment_like_toggle(client, alice, bob, alice_video):
    r = await client.post(
        f"{API}/comments/{alice_video['id']}", json={"content": "hello"}, headers=alice["headers"]
    )
    comment_id = r.json()["data"]["comment"]["id"]

    r = await client.post(f"{API}/likes/toggle/c/{comment_id}", headers=bob["headers"])
    assert r.status_code == 200
    assert r.json()["data"] == {"likeCount": 1, "isLiked": True}

    r = await client.post(f"{API}/likes/toggle/c/{comment_id}", headers=bob["headers"])
    assert r.json()["data"] == {"likeCount": 0, "isLiked": False}

    r = await client.post(f"{API}/likes/toggle/c/{uuid.uuid4()}", headers=bob["headers"])
    assert r.status_code == 404


async def test_liked_videos_excludes_dislikes(client, alice, bob):
    liked = await upload_video(client, alice, title="Liked one")
    disliked = await upload_video(client, alice, title="Disliked one")
    await _react(client, bob, liked["id"], "like")
    await _react(client, bob, disliked["id"], "dislike")

    r = await client.get(f"{API}/likes/videos", headers=bob["headers"])
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["likedVideosCnt"] == 1
    assert data["likedVideos"][0]["id"] == liked["id"]
    assert data["likedVideos"][0]["title"] == "Liked one"
