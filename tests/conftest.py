"""
Test configuration and fixtures for the HomelyHub API.
Provides an in-memory database per test, an HTTP client wired to it, and data factories.
"""

import os
import tempfile

# Must be set before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="homelyhub-test-uploads-"))

import io
import uuid
from datetime import date
from typing import AsyncGenerator, Dict, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from homelyhub.main import app
from homelyhub.database import Base, get_db
from homelyhub.models import Booking, Property, User, UserRole
from homelyhub.repositories.user import UserRepository
from homelyhub.schemas.booking import BookingCreate
from homelyhub.schemas.property import PropertyCreate
from homelyhub.services.booking import BookingService
from homelyhub.services.image import LocalImageStorage
from homelyhub.services.property import PropertyService
from homelyhub.utils.auth import create_access_token
from homelyhub.utils.dependencies import get_image_storage

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "testpassword123"


@pytest.fixture
async def test_engine():
    """Fresh in-memory database with every table created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests that call repositories and services directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
async def client(session_factory, upload_dir) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app, with one database session per request."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_storage] = lambda: LocalImageStorage(str(upload_dir), "/uploads")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client

    app.dependency_overrides.clear()


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: Optional[str] = None,
        password: str = TEST_PASSWORD,
        name: str = "Test User",
        role: UserRole = UserRole.GUEST,
        phone: Optional[str] = "+919812345678",
        is_active: bool = True
    ) -> dict:
        return {
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "role": role,
            "phone": phone,
            "is_active": is_active,
        }

    @staticmethod
    async def create_user(db_session: AsyncSession, **kwargs) -> User:
        return await UserRepository(db_session).create_user(UserFactory.create_user_data(**kwargs))


class PropertyFactory:
    """Factory for listing payloads and stored properties."""

    @staticmethod
    def create_property_payload(**overrides) -> dict:
        payload = {
            "title": "Sea-view villa",
            "description": "Three bedrooms a short walk from the beach",
            "location": {
                "street": "12 Beach Road",
                "city": "Goa",
                "state": "Goa",
                "country": "India",
                "pincode": "403001",
                "coordinates": {"lat": 15.2993, "lng": 74.124},
            },
            "price": 1000,
            "images": [{"public_id": "villa_front", "url": "https://cdn.example.com/villa_front.jpg"}],
            "amenities": ["wifi", "pool"],
            "type": "villa",
            "bedrooms": 3,
            "bathrooms": 2,
            "max_guests": 6,
            "check_in_time": "14:00",
            "check_out_time": "11:00",
            "house_rules": ["No smoking", "No parties"],
        }
        payload.update(overrides)
        return payload

    @staticmethod
    async def create_property(db_session: AsyncSession, host: User, **overrides) -> Property:
        payload = PropertyFactory.create_property_payload(**overrides)
        return await PropertyService(db_session).create_property(host, PropertyCreate(**payload))


class BookingFactory:
    """Factory for bookings created through the booking workflow."""

    @staticmethod
    async def create_booking(
        db_session: AsyncSession,
        guest: User,
        property_obj: Property,
        check_in: date = date(2024, 1, 1),
        check_out: date = date(2024, 1, 3),
        adults: int = 2,
        children: int = 0
    ) -> Dict:
        booking_data = BookingCreate(
            property_id=property_obj.id,
            check_in_date=check_in.isoformat(),
            check_out_date=check_out.isoformat(),
            guests={"adults": adults, "children": children},
        )
        return await BookingService(db_session).create_booking(guest, booking_data)


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header for a user."""
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


def make_image_bytes(fmt: str = "PNG", size=(8, 6)) -> bytes:
    """Small in-memory image generated with Pillow."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 80, 40)).save(buffer, format=fmt)
    return buffer.getvalue()


# Common test fixtures
@pytest.fixture
async def host(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="host@example.com", name="Harini Host", role=UserRole.HOST)


@pytest.fixture
async def other_host(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="other.host@example.com", name="Omar Host", role=UserRole.HOST)


@pytest.fixture
async def guest(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="guest@example.com", name="Gita Guest")


@pytest.fixture
async def other_guest(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="other.guest@example.com", name="Ola Guest")


@pytest.fixture
async def admin(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="admin@example.com", name="Ada Admin", role=UserRole.ADMIN)


@pytest.fixture
async def inactive_user(db_session: AsyncSession) -> User:
    return await UserFactory.create_user(db_session, email="inactive@example.com", name="Ivan Inactive", is_active=False)


@pytest.fixture
async def test_property(db_session: AsyncSession, host: User) -> Property:
    return await PropertyFactory.create_property(db_session, host)


@pytest.fixture
async def test_booking(db_session: AsyncSession, guest: User, test_property: Property) -> Booking:
    """Booking for two nights (2024-01-01 to 2024-01-03) at 1000 per night."""
    created = await BookingFactory.create_booking(db_session, guest, test_property)
    booking = await db_session.get(Booking, created["id"])
    return booking
