"""
PlaceShare Backend: Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the whole suite.
How:   Each test gets its own SQLite file database (tables created from the
       ORM metadata), its own storage directory, and an app built by
       `create_app(test_settings)` with a fake geocoder on `app.state`.

Fixture Hierarchy (all function-scoped):
    test_settings ─▶ database ─────────────▶ writer
                 └─▶ app ─▶ client ─▶ register_user
    file_service, cleaner, fake_geocoder, sample_image_bytes
"""

from pathlib import Path
from typing import List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from placeshare.config import Settings
from placeshare.database import Database
from placeshare.exceptions import GeocodingError
from placeshare.main import create_app
from placeshare.schemas.place import Coordinates
from placeshare.services.file_service import FileService
from placeshare.services.geocoding import GeocodingResolver
from placeshare.services.ownership import OwnershipGuard
from placeshare.services.place_writer import PlaceWriter
from placeshare.services.resource_cleaner import ResourceCleaner


class FakeGeocoder(GeocodingResolver):
    """Records every address; fails when `fail` is set."""

    def __init__(self, latitude: float = 40.7484405, longitude: float = -73.9878584):
        self.coordinates = Coordinates(latitude=latitude, longitude=longitude)
        self.fail = False
        self.calls: List[str] = []

    async def resolve(self, address: str) -> Coordinates:
        self.calls.append(address)
        if self.fail:
            raise GeocodingError(context={"address": address})
        return self.coordinates


# ══════════════════════════════════════════════════════════════════════════
# Configuration and resources
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    storage = tmp_path / "images"
    storage.mkdir()
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        storage_root=str(storage),
        jwt_secret_key="test-secret-not-for-production",
        google_maps_api_key="",
        db_transaction_timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def storage_dir(test_settings) -> Path:
    return Path(test_settings.storage_root)


@pytest_asyncio.fixture
async def database(test_settings):
    db = Database(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def file_service(test_settings) -> FileService:
    return FileService(test_settings.storage_root, test_settings.max_file_size)


@pytest.fixture
def cleaner(file_service) -> ResourceCleaner:
    return ResourceCleaner(file_service)


@pytest.fixture
def writer(database) -> PlaceWriter:
    return PlaceWriter(database, OwnershipGuard(), timeout=5.0)


@pytest.fixture
def fake_geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Smallest JPEG the upload path accepts: SOI + JFIF header + EOI."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )


# ══════════════════════════════════════════════════════════════════════════
# Application and HTTP client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(test_settings, fake_geocoder):
    application = create_app(test_settings)
    application.state.geocoder = fake_geocoder
    await application.state.database.create_all()
    yield application
    await application.state.cleaner.drain()
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register_user(client, sample_image_bytes):
    """
    Sign up through the API; returns the {userId, email, token} body.

    Usage:
        ada = await register_user("ada@mail.com")
        headers = {"Authorization": f"Bearer {ada['token']}"}
    """

    async def _register(email: str = "ada@mail.com", name: str = "Ada", password: str = "secret123"):
        response = await client.post(
            "/api/users/signup",
            data={"name": name, "email": email, "password": password},
            files={"image": ("avatar.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def bearer():
    return auth_header
