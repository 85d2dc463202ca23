"""
Pytest configuration and fixtures.
"""

import sys
import os
import uuid
from typing import AsyncGenerator

# Settings are read at import time
os.environ.setdefault("APP_ENV", "development")
os.environ["DATABASE_URL"] = ""
os.environ["PUBLIC_CARDS_CACHE_TTL"] = "0"
os.environ["MEDIA_CLEANUP_VIA_WORKER"] = "false"

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Add app to path
sys.path.append(os.getcwd())

from app.database import Base
from app.models.temple import Temple  # noqa: F401  (registers the table)
from app.schemas.caller import Caller
from app.schemas.temple import TempleCreate
from app.services.media_service import MediaLifecycle, MediaStoreError, MediaUpload, StoredAsset
from app.services.temple_service import TempleService

# Use in-memory SQLite for tests
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


class FakeMediaStore:
    """In-memory media store that records every call in order."""

    def __init__(self, fail_uploads=(), fail_deletes: bool = False):
        self.fail_uploads = set(fail_uploads)
        self.fail_deletes = fail_deletes
        self.events = []
        self.uploaded = []
        self.deleted = []

    async def upload(self, upload: MediaUpload) -> StoredAsset:
        self.events.append(("upload", upload.filename))
        if upload.filename in self.fail_uploads:
            raise MediaStoreError(f"upload of {upload.filename} failed")
        stem = os.path.splitext(upload.filename)[0]
        public_id = f"devalaya/temples/{stem}"
        asset = StoredAsset(
            url=f"https://res.cloudinary.com/demo/image/upload/v1/{public_id}.jpg",
            public_id=public_id,
        )
        self.uploaded.append(asset)
        return asset

    async def delete(self, public_id: str, kind: str = "image") -> None:
        self.events.append(("delete", public_id))
        if self.fail_deletes:
            raise MediaStoreError(f"delete of {public_id} failed")
        self.deleted.append(public_id)


def image(name: str) -> MediaUpload:
    return MediaUpload(filename=name, content=b"\x89PNG fake bytes")


def temple_payload(**overrides) -> dict:
    """Raw creation payload in the camelCase wire shape."""
    payload = {
        "templeName": "Shiva Mandir",
        "location": {
            "address": "12 Temple Road",
            "city": "Pune",
            "state": "Maharashtra",
            "country": "India",
        },
        "description": "An ancient Shiva temple.",
        "history": "Built in the 12th century.",
        "darshanTimings": {"morning": "6:00 AM - 12:00 PM", "evening": "4:00 PM - 9:00 PM"},
        "activitiesAndServices": "Abhishekam, Annadanam",
        "contactDetails": {
            "email": "contact@shivamandir.in",
            "phone": "9876543210",
            "website": "https://shivamandir.in",
        },
        "specialCeremonies": [
            {"name": "Maha Shivaratri", "dateTime": "2027-03-06T18:00:00"},
        ],
        "upcomingEvents": [
            {"title": "Rudrabhishekam", "description": "Monthly ritual", "eventDate": "2027-01-10T07:00:00"},
        ],
    }
    payload.update(overrides)
    return payload


def make_create(**overrides) -> TempleCreate:
    return TempleCreate.model_validate(temple_payload(**overrides))


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for a test."""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def media_store() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture
def media(media_store) -> MediaLifecycle:
    return MediaLifecycle(media_store)


@pytest.fixture
def service(db, media) -> TempleService:
    return TempleService(db, media=media)


@pytest.fixture
def temple_admin() -> Caller:
    return Caller(actor_id=uuid.uuid4(), role="templeAdmin", account_status="active")


@pytest.fixture
def other_temple_admin() -> Caller:
    return Caller(actor_id=uuid.uuid4(), role="templeAdmin", account_status="active")


@pytest.fixture
def admin() -> Caller:
    return Caller(actor_id=uuid.uuid4(), role="admin", account_status="active")


@pytest.fixture
def devotee() -> Caller:
    return Caller(actor_id=uuid.uuid4(), role="user", account_status="active")


@pytest_asyncio.fixture
async def temple(service, temple_admin) -> Temple:
    """A registered, unverified temple owned by `temple_admin`."""
    return await service.create_temple(temple_admin, make_create(), cover_image=image("cover.jpg"))
