"""
Centralized Test Configuration.
"""

import pytest
from datetime import date
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool

from backend.app.main import app
from backend.app.db.session import get_db, Base
from backend.app.core.reliability import notification_circuit_breaker
from backend.app.domain.ledger.entry_service import EntryService
from backend.app.models.enums import UserRole
from backend.tests.utils import make_user, actor_for

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
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


@pytest.fixture(scope="session", autouse=True)
def apply_overrides():
    """Route every request-scoped session to the in-memory database."""
    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    notification_circuit_breaker.reset_state()

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


# Users and tokens

@pytest.fixture
async def admin(db_session):
    return await make_user(db_session, "admin", UserRole.ADMIN, "Administrator")


@pytest.fixture
async def operator(db_session):
    return await make_user(db_session, "operator", UserRole.OPERATOR, "Operator")


@pytest.fixture
async def donor(db_session):
    return await make_user(db_session, "donor1", UserRole.VIEWER, "Ramesh Shah")


@pytest.fixture
def admin_actor(admin):
    return actor_for(admin)


@pytest.fixture
def make_entry(db_session, donor, admin_actor):
    """Factory creating an entry for the default donor."""
    donor_id = donor.id

    async def _make(amount: int = 100000, quantity: int = 1, user_id: int = None, auction_date: date = date(2025, 8, 15)):
        return await EntryService.create_entry(
            db_session,
            user_id=user_id or donor_id,
            description="Shanti Dhara boli",
            amount=amount,
            quantity=quantity,
            auction_date=auction_date,
            actor=admin_actor,
        )
    return _make

