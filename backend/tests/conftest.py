"""
Centralized Test Configuration.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from backend.parcelpro.main import app
from backend.parcelpro.db.session import get_db, Base
from backend.parcelpro.core.jwt import create_access_token
from backend.parcelpro.models.enums import UserRole
from backend.parcelpro.models.user import User
from backend.parcelpro.services.payment_gateway import get_payment_gateway

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)).lower():
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


class FakePaymentGateway:
    """Stands in for the external gateway; records every intent it creates."""

    def __init__(self):
        self.calls = []

    async def create_payment_intent(self, amount: int, currency: str) -> str:
        self.calls.append((amount, currency))
        return f"pi_{len(self.calls)}_secret_test"


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture(autouse=True)
def apply_overrides(payment_gateway):
    """Route the app to the test database and the fake gateway."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: payment_gateway
    yield
    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@dataclass
class Actor:
    """A stored user plus ready-to-send auth headers."""
    user: User
    headers: dict

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def email(self) -> str:
        return self.user.email


@pytest.fixture
def make_user(db_session):
    """Factory inserting a user directly and issuing a token for it."""

    async def _make_user(
        email: str,
        role: UserRole = UserRole.SENDER,
        name: Optional[str] = None,
        created_at: Optional[datetime] = None,
        **fields
    ) -> Actor:
        user = User(
            email=email,
            name=name or email.split("@")[0].title(),
            role=role,
            created_at=created_at or datetime.now(timezone.utc),
            **fields
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        token = create_access_token(email)
        return Actor(user=user, headers={"Authorization": f"Bearer {token}"})

    return _make_user


@pytest.fixture
async def sender(make_user):
    return await make_user("sender@test.com", UserRole.SENDER, name="Sender A")


@pytest.fixture
async def admin(make_user):
    return await make_user("admin@test.com", UserRole.ADMIN, name="Admin")


@pytest.fixture
async def delivery_man(make_user):
    return await make_user("rider@test.com", UserRole.DELIVERY_PERSON, name="Rider D")


@pytest.fixture
def book_parcel(client):
    """Factory booking a parcel through the API and returning its JSON."""

    async def _book(actor: Actor, price: float = 1000.0, **fields) -> dict:
        payload = {
            "senderName": actor.user.name,
            "receiverName": "Receiver",
            "deliveryAddress": "House 1, Road 2, Dhaka",
            "parcelType": "Document",
            "weight": 1.5,
            "price": price,
            "requestedDeliveryDate": "2026-11-01",
        }
        payload.update(fields)
        response = await client.post("/parcels", json=payload, headers=actor.headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _book


@pytest.fixture
def assign_parcel(client, admin):
    """Factory assigning a parcel as the admin fixture."""

    async def _assign(parcel_id: str, delivery_man_id: str, approx: str = "2026-11-03") -> dict:
        response = await client.patch(
            "/parcels/assign",
            json={
                "parcelId": parcel_id,
                "deliveryManId": delivery_man_id,
                "approxDeliveryDate": approx,
            },
            headers=admin.headers,
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _assign


@pytest.fixture
async def file_sessions(tmp_path):
    """
    Session factory over a file-backed database.

    Unlike the shared in-memory database, every session here gets its own
    connection, so concurrent requests contend the way they do in production.
    """
    file_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'parcelpro.db'}")
    async with file_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)

    await file_engine.dispose()


@pytest.fixture
async def file_client(file_sessions, apply_overrides):
    """Async client whose requests each open their own connection to the file database."""

    async def override_get_db():
        async with file_sessions() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def error_client():
    """Client that returns the app's 500 responses instead of re-raising the error."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
