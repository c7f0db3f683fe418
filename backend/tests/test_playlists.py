"""Tests for playlists"""

import uuid

from tests.conftest import API, upload_video


async def _create(client, user, name="Favourites", description="best clips"):
    r = await client.post(f"{API}/playlists", json={"name": name, "description": description}, headers=user["headers"])
    assert r.status_code == 201, r.text
    return r.json()["data"]


async def test_create_and_fetch_playlist(client, alice):
    playlist = await _create(client, alice)
    assert playlist["name"] == "Favourites"
    assert playlist["ownerId"] == alice["id"]
    assert playlist["videos"] == []

    r = await client.get(f"{API}/playlists/{playlist['id']}", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["data"]["id"] == playlist["id"]


async def test_create_requires_name(client, alice):
    r = await client.post(f"{API}/playlists", json={"name": ""}, headers=alice["headers"])
    assert r.status_code == 400

    r = await client.post(f"{API}/playlists", json={"name": "   "}, headers=alice["headers"])
    assert r.status_code == 400


async def test_create_trims_name(client, alice):
    playlist = await _create(client, alice, name="  Road trip  ", description=" songs ")
    assert playlist["name"] == "Road trip"
    assert playlist["description"] == "songs"


async def test_add_and_remove_videos(client, alice, alice_video):
    playlist = await _create(client, alice)
    second = await upload_video(client, alice, title="Second")

    r = await client.patch(f"{API}/playlists/add/{alice_video['id']}/{playlist['id']}", headers=alice["headers"])
    assert r.status_code == 200
    r = await client.patch(f"{API}/playlists/add/{second['id']}/{playlist['id']}", headers=alice["headers"])
    assert [v["id"] for v in r.json()["data"]["videos"]] == [alice_video["id"], second["id"]]
    entry = r.json()["data"]["videos"][0]
    assert entry["owner"]["username"] == "alice"
    assert entry["ownerId"] == alice["id"]

    r = await client.patch(f"{API}/playlists/add/{alice_video['id']}/{playlist['id']}", headers=alice["headers"])
    assert r.status_code == 400
    assert r.json()["message"] == "Video already exists in playlist"

    r = await client.patch(f"{API}/playlists/remove/{alice_video['id']}/{playlist['id']}", headers=alice["headers"])
    assert r.status_code == 200
    assert [v["id"] for v in r.json()["data"]["videos"]] == [second["id"]]

    r = await client.patch(f"{API}/playlists/remove/{alice_video['id']}/{playlist['id']}", headers=alice["headers"])
    assert r.status_code == 400


async def test_add_missing_video(client, alice):
    playlist = await _create(client, alice)
    r = await client.patch(f"{API}/playlists/add/{uuid.uuid4()}/{playlist['id']}", headers=alice["headers"])
    assert r.status_code == 404


async def test_deleted_video_drops_out_of_playlist(client, alice, alice_video):
    playlist = await _create(client, alice)
    await client.patch(f"{API}/playlists/add/{alice_video['id']}/{playlist['id']}", headers=alice["headers"])
    await client.delete(f"{API}/videos/{alice_video['id']}", headers=alice["headers"])

    r = await client.get(f"{API}/playlists/{playlist['id']}", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["data"]["videos"] == []


async def test_only_owner_modifies(client, alice, bob, alice_video):
    playlist = await _create(client, alice)
    pid = playlist["id"]

    r = await client.patch(f"{API}/playlists/add/{alice_video['id']}/{pid}", headers=bob["headers"])
    assert r.status_code == 403
    r = await client.patch(f"{API}/playlists/{pid}", json={"name": "mine"}, headers=bob["headers"])
    assert r.status_code == 403
    r = await client.delete(f"{API}/playlists/{pid}", headers=bob["headers"])
    assert r.status_code == 403

    # Anyone signed in can read it
    r = await client.get(f"{API}/playlists/{pid}", headers=bob["headers"])
    assert r.status_code == 200


async def test_update_playlist(client, alice):
    playlist = await _create(client, alice)
    r = await client.patch(f"{API}/playlists/{playlist['id']}", json={"name": "Renamed"}, headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Renamed"
    assert r.json()["data"]["description"] == "best clips"

    r = await client.patch(f"{API}/playlists/{playlist['id']}", json={"name": " "}, headers=alice["headers"])
    assert r.status_code == 400


async def test_delete_playlist(client, alice):
    playlist = await _create(client, alice)
    r = await client.delete(f"{API}/playlists/{playlist['id']}", headers=alice["headers"])
    assert r.status_code == 200
    r = await client.get(f"{API}/playlists/{playlist['id']}", headers=alice["headers"])
    assert r.status_code == 404


async def test_user_playlists(client, alice, bob):
    await _create(client, alice, name="Music")
    await _create(client, alice, name="Travel")
    await _create(client, bob, name="Music too")

    r = await client.get(f"{API}/playlists/user/{alice['id']}", headers=bob["headers"])
    data = r.json()["data"]
    assert data["total"] == 2
    assert {p["name"] for p in data["playlists"]} == {"Music", "Travel"}
    assert {p["owner"]["username"] for p in data["playlists"]} == {"alice"}
    assert data["playlists"][0]["owner"]["id"] == alice["id"]
    assert data["playlists"][0]["owner"]["avatar"]

    r = await client.get(f"{API}/playlists/user/{alice['id']}", params={"query": "mus"}, headers=bob["headers"])
    assert [p["name"] for p in r.json()["data"]["playlists"]] == ["Music"]
