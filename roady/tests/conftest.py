"""
Centralized Test Configuration.
"""

import uuid
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from roady.app.main import app
from roady.app.db.session import get_db, Base
from roady.app.models.gps_point import GPSPoint
import roady.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}

    async def ping(self):
        return True

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        return True

    async def setex(self, key, ttl, value):
        self.store[key] = value
        return True

    async def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0

    async def exists(self, key):
        return 1 if key in self.store else 0

    async def flushdb(self):
        self.store = {}


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def mock_redis(monkeypatch):
    fake = MockRedis()
    monkeypatch.setattr(redis_client_module, "redis_client", fake)
    return fake


@pytest.fixture(autouse=True)
def apply_overrides(session_factory, mock_redis):
    """Route every request's session to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides = {}


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation and assertions
@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def signup(client):
    """Register a user; returns (user_id, auth headers)."""

    async def _signup(username: str = "driver1", password: str = "password123"):
        response = await client.post("/auth/signup", json={
            "email": f"{username}@test.com",
            "username": username,
            "password": password
        })
        assert response.status_code == 201
        data = response.json()
        return data["user"]["id"], {"Authorization": f"Bearer {data['token']}"}

    return _signup


@pytest.fixture
def start_trip(client):
    """Start a trip for a user; returns the response body."""

    async def _start(user_id: str, headers: dict, **fields):
        response = await client.post("/tracking/start", json={"userId": user_id, **fields}, headers=headers)
        assert response.status_code == 200
        return response.json()

    return _start


@pytest.fixture
def count_points(session_factory):
    async def _count(trip_id=None) -> int:
        async with session_factory() as session:
            query = select(func.count(GPSPoint.id))
            if trip_id is not None:
                query = query.where(GPSPoint.trip_id == uuid.UUID(str(trip_id)))
            result = await session.execute(query)
            return result.scalar()

    return _count
