"""Shared test fixtures for the diary backend."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENCRYPTION_KEY", "env-encryption-secret")
os.environ.setdefault("SESSION_SECRET", "env-session-secret")

import httpx
import pytest
from fastapi.testclient import TestClient

from nikki.db import Database
from nikki.db_init import init_db
from nikki.main import create_app
from nikki.repositories import AccountStore, EntryStore
from nikki.services.accounts import AccountService
from nikki.services.crypto import ContentCipher
from nikki.services.diary_service import DiaryService
from nikki.services.guest_sync import GuestSyncMerger
from nikki.services.image_hosting import ImageHostingClient
from nikki.services.stats import StatisticsEngine
from nikki.settings import Settings

HEX_SECRET = "8f3c2a1b9d7e6f5a4b3c2d1e0f9a8b7c6d5e4f3a2b1c0d9e8f7a6b5c4d3e2f1a"
UPLOADED_URL = "https://res.cloudinary.com/demo/image/upload/v1/diary.png"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'nikki.db'}",
        ENCRYPTION_KEY=HEX_SECRET,
        SESSION_SECRET="test-session-secret",
        CLOUDINARY_CLOUD_NAME="demo",
        CLOUDINARY_UPLOAD_PRESET="diary",
        CLOUDINARY_API_KEY="key-123",
    )


@pytest.fixture
async def database(settings):
    db = Database(settings.database_url)
    await init_db(db)
    yield db
    await db.dispose()


@pytest.fixture
def cipher():
    return ContentCipher(HEX_SECRET)


@pytest.fixture
def store(database, cipher):
    return EntryStore(database, cipher)


@pytest.fixture
def stats_engine(store):
    return StatisticsEngine(store)


@pytest.fixture
def diary_service(store, stats_engine):
    return DiaryService(store, stats_engine, GuestSyncMerger(store))


@pytest.fixture
def account_service(database, stats_engine):
    return AccountService(AccountStore(database), stats_engine)


@pytest.fixture
def upload_requests():
    return []


@pytest.fixture
def image_client(upload_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        upload_requests.append(request)
        return httpx.Response(200, json={"secure_url": UPLOADED_URL})

    return ImageHostingClient("demo", "diary", "key-123", transport=httpx.MockTransport(handler))


@pytest.fixture
def client(settings, image_client):
    app = create_app(settings=settings, image_client=image_client)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client):
    response = client.post(
        "/v1/auth/register",
        json={"name": "Aiko", "email": "aiko@example.com", "password": "correct-horse"},
    )
    assert response.status_code == 201
    return client
