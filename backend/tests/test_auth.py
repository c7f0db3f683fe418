"""Tests for login, the token gate, refresh rotation and logout"""

from tests.conftest import API, PASSWORD, login, register


async def test_login_returns_tokens_and_sets_cookies(client):
    await register(client, "carol")
    r = await login(client, username="carol")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["statusCode"] == 200
    assert body["data"]["user"]["username"] == "carol"
    assert "passwordHash" not in body["data"]["user"]
    assert body["data"]["accessToken"]
    assert body["data"]["refreshToken"]
    assert r.cookies.get("accessToken") == body["data"]["accessToken"]
    assert r.cookies.get("refreshToken") == body["data"]["refreshToken"]


async def test_login_by_email(client):
    await register(client, "carol")
    r = await login(client, email="carol@example.com")
    assert r.status_code == 200
    assert r.json()["data"]["user"]["email"] == "carol@example.com"


async def test_login_unknown_user(client):
    r = await login(client, username="nobody")
    assert r.status_code == 404
    assert r.json() == {"message": "User does not exist", "success": False}


async def test_login_wrong_password(client):
    await register(client, "carol")
    r = await login(client, username="carol", password="wrong-password")
    assert r.status_code == 401
    assert r.json()["success"] is False


async def test_login_requires_username_or_email(client):
    r = await client.post(f"{API}/users/login", json={"password": PASSWORD})
    assert r.status_code == 400
    assert r.json()["success"] is False


async def test_gate_accepts_cookie(client):
    await register(client, "carol")
    await login(client, username="carol")
    r = await client.get(f"{API}/users/current-user")
    assert r.status_code == 200
    assert r.json()["data"]["username"] == "carol"


async def test_gate_accepts_bearer_header(client, alice):
    r = await client.get(f"{API}/users/current-user", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["data"]["id"] == alice["id"]


async def test_gate_rejects_missing_token(client):
    r = await client.get(f"{API}/users/current-user")
    assert r.status_code == 401
    assert r.json()["success"] is False


async def test_gate_rejects_garbage_token(client):
    r = await client.get(f"{API}/users/current-user", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


async def test_gate_rejects_refresh_token_as_access(client, alice):
    r = await client.get(
        f"{API}/users/current-user",
        headers={"Authorization": f"Bearer {alice['refresh_token']}"},
    )
    assert r.status_code == 401


async def test_refresh_rotates_tokens(client, alice):
    r = await client.post(f"{API}/users/refresh-token", json={"refreshToken": alice["refresh_token"]})
    assert r.status_code == 200
    tokens = r.json()["data"]
    assert tokens["refreshToken"] != alice["refresh_token"]
    assert tokens["accessToken"] != alice["access_token"]

    r = await client.get(
        f"{API}/users/current-user",
        headers={"Authorization": f"Bearer {tokens['accessToken']}"},
    )
    assert r.status_code == 200

    # The rotated-out token is no longer accepted
    client.cookies.clear()
    r = await client.post(f"{API}/users/refresh-token", json={"refreshToken": alice["refresh_token"]})
    assert r.status_code == 401
    assert r.json()["message"] == "Refresh token is expired or used"


async def test_refresh_from_cookie(client):
    await register(client, "carol")
    await login(client, username="carol")
    r = await client.post(f"{API}/users/refresh-token")
    assert r.status_code == 200
    assert r.cookies.get("refreshToken") == r.json()["data"]["refreshToken"]


async def test_refresh_without_token(client):
    r = await client.post(f"{API}/users/refresh-token")
    assert r.status_code == 401


async def test_refresh_with_invalid_token(client):
    r = await client.post(f"{API}/users/refresh-token", json={"refreshToken": "garbage"})
    assert r.status_code == 401


async def test_logout_invalidates_refresh_token(client, alice):
    r = await client.post(f"{API}/users/logout", headers=alice["headers"])
    assert r.status_code == 200
    assert r.json()["data"] == {}

    client.cookies.clear()
    r = await client.post(f"{API}/users/refresh-token", json={"refreshToken": alice["refresh_token"]})
    assert r.status_code == 401

    # Logging out twice is harmless
    r = await client.post(f"{API}/users/logout", headers=alice["headers"])
    assert r.status_code == 200


async def test_change_password(client, alice):
    r = await client.post(
        f"{API}/users/change-password",
        json={"oldPassword": "wrong", "newPassword": "another-pass"},
        headers=alice["headers"],
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid old password"

    r = await client.post(
        f"{API}/users/change-password",
        json={"oldPassword": PASSWORD, "newPassword": "another-pass"},
        headers=alice["headers"],
    )
    assert r.status_code == 200

    assert (await login(client, username="alice")).status_code == 401
    assert (await login(client, username="alice", password="another-pass")).status_code == 200


def _cookie_headers(response):
    """Map cookie name to its lower-cased Set-Cookie header."""
    return {h.split("=", 1)[0]: h.lower() for h in response.headers.get_list("set-cookie")}


async def test_login_cookies_are_secure_and_http_only(client):
    await register(client, "carol")
    r = await login(client, username="carol")
    cookies = _cookie_headers(r)
    assert set(cookies) == {"accessToken", "refreshToken"}
    for header in cookies.values():
        assert "; httponly" in header
        assert "; secure" in header
        assert "; samesite=lax" in header
        assert "; path=/" in header
    assert "; max-age=86400;" in cookies["accessToken"]
    assert "; max-age=864000;" in cookies["refreshToken"]


async def test_refresh_sets_secure_cookies(client, alice):
    r = await client.post(f"{API}/users/refresh-token", json={"refreshToken": alice["refresh_token"]})
    cookies = _cookie_headers(r)
    assert set(cookies) == {"accessToken", "refreshToken"}
    assert cookies["refreshToken"].startswith(f"refreshtoken={r.json()['data']['refreshToken'].lower()};")
    for header in cookies.values():
        assert "; httponly" in header and "; secure" in header


async def test_logout_expires_both_cookies(client):
    await register(client, "carol")
    await login(client, username="carol")
    r = await client.post(f"{API}/users/logout")
    assert r.status_code == 200
    cookies = _cookie_headers(r)
    assert set(cookies) == {"accessToken", "refreshToken"}
    for header in cookies.values():
        assert "; max-age=0" in header
        assert "; httponly" in header and "; secure" in header

    assert not client.cookies.get("accessToken")
    r = await client.get(f"{API}/users/current-user")
    assert r.status_code == 401
