"""
CaseDesk Legal - Test Configuration and Fixtures

Provides a fresh in-memory database per test, an HTTP test client bound to
it, and account/bearer-token fixtures.
"""

import os

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment BEFORE importing app code
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["DEBUG"] = "true"
os.environ["AUTH_BACKEND"] = "direct"

from src.database import Base, get_db
from src.main import app
from src.models import Account, Case, Client, Document, Task  # noqa: F401
from src.auth import create_access_token
from src.rate_limit import rate_limit_store
from src.stores.accounts import AccountStore


TEST_PASSWORD = "TestPassword123"


@pytest_asyncio.fixture
async def db():
    """Provide a test database session with fresh tables for each test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db):
    """Provide an async HTTP test client using the test database."""
    async def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    rate_limit_store.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    rate_limit_store.reset()


@pytest_asyncio.fixture
async def account(db):
    """A lawyer account stored in the test database (normalized form)."""
    return await AccountStore(db).create_account({
        "email": "lawyer@example.com",
        "password": TEST_PASSWORD,
        "first_name": "Test",
        "last_name": "Lawyer",
    })


@pytest_asyncio.fixture
async def other_account(db):
    """A second, unrelated account."""
    return await AccountStore(db).create_account({
        "email": "other@example.com",
        "password": TEST_PASSWORD,
        "first_name": "Other",
        "last_name": "Lawyer",
    })


@pytest.fixture
def auth_headers(account):
    """Bearer headers for `account`."""
    return bearer(account)


@pytest.fixture
def other_headers(other_account):
    """Bearer headers for `other_account`."""
    return bearer(other_account)


def bearer(account):
    """Authorization header for a normalized account."""
    return {"Authorization": f"Bearer {create_access_token(account)}"}
