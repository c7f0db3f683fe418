"""Pytest configuration and shared fixtures"""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from vidtube.config import Settings, get_settings
from vidtube.db.base import Base
from vidtube.db.session import get_db
from vidtube.dependencies import get_media_storage
from vidtube.main import app as fastapi_app
from vidtube.services.media_service import MediaAsset, MediaStorageError, public_id_from_url

API = "/api/v1"
PASSWORD = "s3cret-pass"


class FakeMediaStorage:
    """Stands in for Cloudinary: records uploads and deletes."""

    def __init__(self):
        self.uploads = []
        self.destroyed = []
        self.fail_uploads = False

    async def upload_file(self, file, resource_type="auto"):
        await file.read()
        if self.fail_uploads:
            raise MediaStorageError("media host unavailable")
        name = uuid.uuid4().hex
        url = f"https://res.cloudinary.com/demo/{resource_type}/upload/v1700000000/{name}.bin"
        self.uploads.append((file.filename, resource_type))
        return MediaAsset(
            url=url,
            public_id=name,
            resource_type=resource_type,
            duration=42.5 if resource_type == "video" else None,
        )

    async def destroy_url(self, url, resource_type="image"):
        public_id = public_id_from_url(url)
        if public_id:
            self.destroyed.append((public_id, resource_type))


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        access_token_secret="test-access-secret",
        refresh_token_secret="test-refresh-secret",
        cloudinary_cloud_name="demo",
    )


@pytest.fixture
async def session_maker():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Let SQLAlchemy drive BEGIN so SAVEPOINTs work on SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def media():
    return FakeMediaStorage()


@pytest.fixture
def app(settings, session_maker, media):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_settings] = lambda: settings
    fastapi_app.dependency_overrides[get_media_storage] = lambda: media
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://testserver") as c:
        yield c


async def register(client, username, email=None, password=PASSWORD, full_name=None, cover=False):
    files = {"avatar": ("avatar.png", b"\x89PNG-avatar", "image/png")}
    if cover:
        files["coverImage"] = ("cover.png", b"\x89PNG-cover", "image/png")
    return await client.post(
        f"{API}/users/register",
        data={
            "fullName": full_name or username.title(),
            "email": email or f"{username}@example.com",
            "username": username,
            "password": password,
        },
        files=files,
    )


async def login(client, username=None, email=None, password=PASSWORD):
    body = {"password": password}
    if username:
        body["username"] = username
    if email:
        body["email"] = email
    return await client.post(f"{API}/users/login", json=body)


@pytest.fixture
def make_user(client):
    """Register and log in a user; returns its id, tokens and bearer headers."""

    async def _make(username):
        r = await register(client, username)
        assert r.status_code == 201, r.text
        r = await login(client, username=username)
        assert r.status_code == 200, r.text
        data = r.json()["data"]
        # Callers authenticate with explicit headers, not the shared cookie jar
        client.cookies.clear()
        return {
            "id": data["user"]["id"],
            "username": username,
            "access_token": data["accessToken"],
            "refresh_token": data["refreshToken"],
            "headers": {"Authorization": f"Bearer {data['accessToken']}"},
        }

    return _make


@pytest.fixture
async def alice(make_user):
    return await make_user("alice")


@pytest.fixture
async def bob(make_user):
    return await make_user("bob")


async def upload_video(client, user, title="My cat video", description="A cat doing things"):
    r = await client.post(
        f"{API}/videos",
        data={"title": title, "description": description},
        files={
            "videoFile": ("clip.mp4", b"fake-mp4-bytes", "video/mp4"),
            "thumbnail": ("thumb.jpg", b"fake-jpg-bytes", "image/jpeg"),
        },
        headers=user["headers"],
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.fixture
async def alice_video(client, alice):
    return await upload_video(client, alice)
