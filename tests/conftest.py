"""Test fixtures — async test client, test database, factories."""
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator
from uuid import uuid4

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from listing_hub.database import Base
from listing_hub.api.deps import get_session_factory
from listing_hub.main import app
from listing_hub.models import AgentProperty, AgentUnitType, Property, UnitType
from listing_hub.schemas.listing_schema import ListingRecord, Provenance


TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

# Fresh connection per checkout; each test runs on its own event loop.
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
test_session_factory = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest_asyncio.fixture(scope="function")
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create tables and yield the test session factory."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_session_factory

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """A session for seeding rows; commit before reading through the API."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Yield an HTTP test client with the test DB injected."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def make_record(id: str, provenance: Provenance = Provenance.DIRECT, **overrides) -> ListingRecord:
    """Build a ListingRecord with sensible defaults."""
    defaults = {
        "id": id,
        "provenance": provenance,
        "title": f"Listing {id}",
        "property_type": "Apartment",
        "contract_type": "Sale",
        "price": 1_000_000,
        "location": "Dubai Marina",
        "bedrooms": 2,
        "bathrooms": 2,
        "furnishing_status": "Furnished",
        "completion_status": "Ready",
        "amenities": ["Pool", "Gym"],
        "lat": 25.08,
        "lng": 55.14,
        "created_at": BASE_TIME,
    }
    defaults.update(overrides)
    return ListingRecord.model_validate(defaults)


def make_property(agent_id: str, **overrides) -> Property:
    """Build an unsaved Property row owned by ``agent_id``."""
    defaults = {
        "id": str(uuid4()),
        "agent_id": agent_id,
        "creator_type": "agent",
        "title": "Marina View Apartment",
        "type": "Apartment",
        "contract_type": "Sale",
        "price": 1_000_000,
        "bedrooms": 2,
        "bathrooms": 2,
        "sqft": 1200.0,
        "furnishing_status": "Furnished",
        "completion_status": "Ready",
        "location": "Dubai Marina",
        "lat": 25.08,
        "lng": 55.14,
        "amenities": ["Pool", "Gym"],
        "images": ["https://cdn.example.com/1.jpg"],
        "created_at": BASE_TIME,
    }
    defaults.update(overrides)
    return Property(**defaults)


def make_opt_in(agent_id: str, prop: Property, **overrides) -> AgentProperty:
    defaults = {"agent_id": agent_id, "property_id": prop.id, "status": "active", "created_at": BASE_TIME}
    defaults.update(overrides)
    return AgentProperty(**defaults)


def make_unit_type(project: Property, **overrides) -> UnitType:
    defaults = {
        "id": str(uuid4()),
        "project_id": project.id,
        "developer_id": project.agent_id,
        "name": "2BR Type A",
        "price_range": "1,200,000 - 1,800,000",
        "size_range": "750 - 1,100",
        "units_available": 12,
        "created_at": BASE_TIME,
    }
    defaults.update(overrides)
    return UnitType(**defaults)


def make_unit_link(agent_id: str, unit: UnitType) -> AgentUnitType:
    return AgentUnitType(agent_id=agent_id, unit_type_id=unit.id, created_at=BASE_TIME)


def hours_later(hours: int) -> datetime:
    return BASE_TIME + timedelta(hours=hours)
