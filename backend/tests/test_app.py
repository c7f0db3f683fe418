"""Tests for app-level wiring: health check and error envelope"""

from tests.conftest import API


async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_unknown_route_uses_error_envelope(client):
    r = await client.get(f"{API}/nothing-here")
    assert r.status_code == 404
    assert r.json() == {"message": "Not Found", "success": False}


async def test_process_time_header(client):
    r = await client.get("/health")
    assert "x-process-time" in r.headers
