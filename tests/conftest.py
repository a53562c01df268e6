"""
Pytest configuration and fixtures for SiteBuilder tests.
"""
import json
import uuid
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from sqlalchemy import JSON
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# IMPORTANT: Patch PostgreSQL types for SQLite compatibility
# Must be done before importing any models
import sqlalchemy.dialects.postgresql as pg_dialect
from sqlalchemy.types import TypeDecorator, CHAR
import uuid as uuid_module


# Custom UUID type that works with SQLite
class SQLiteUUID(TypeDecorator):
    """SQLite-compatible UUID type."""
    impl = CHAR(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return uuid_module.UUID(value)
        return value


pg_dialect.JSONB = JSON
pg_dialect.UUID = SQLiteUUID

from sitebuilder.database import get_db
from sitebuilder.integrations.llm import get_text_generator
from sitebuilder.models.base import Base
from sitebuilder.models.tenant import Tenant, TenantStatus
from sitebuilder.models.user import User, UserStatus

# Use SQLite for testing (in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000002")
TENANT_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")


# ============================================================================
# Generated documents
# ============================================================================

def make_document(**overrides) -> dict:
    """A valid hero-first document with four components."""
    document = {
        "name": "Luxury Pet Hotel",
        "subdomain": "luxury-pet-hotel",
        "description": "Five-star boarding for pets in Dubai.",
        "industry": "hospitality",
        "primaryColor": "#aa5500",
        "components": [
            {
                "type": "hero",
                "props": {
                    "title": "Luxury Pet Hotel",
                    "subtitle": "Where pets holiday too",
                    "ctaText": "Book a Stay",
                    "ctaLink": "#contact",
                    "image": "https://images.unsplash.com/photo-1.jpg",
                    "alignment": "center",
                },
            },
            {
                "type": "features",
                "props": {
                    "title": "Amenities",
                    "features": [
                        {"icon": "star", "title": "Suites", "description": "Climate-controlled suites"},
                        {"title": "Spa", "description": "Grooming and massage"},
                    ],
                },
            },
            {
                "type": "pricing",
                "props": {
                    "title": "Rates",
                    "plans": [
                        {
                            "name": "Nightly",
                            "price": "$1,299/mo",
                            "description": "Per night",
                            "features": ["Suite", "Meals"],
                            "ctaText": "Reserve",
                            "featured": True,
                        },
                    ],
                },
            },
            {
                "type": "contact",
                "props": {
                    "title": "Get In Touch",
                    "subtitle": "We reply within a day",
                    "email": "hello@example.com",
                },
            },
        ],
    }
    document.update(overrides)
    return document


class FakeGenerator:
    """Text generator returning canned raw text and recording its calls."""

    def __init__(self, raw: str = ""):
        self.raw = raw
        self.calls: list[tuple[str, str]] = []

    async def generate(self, prompt: str, response_format_hint: str = "json") -> str:
        self.calls.append((prompt, response_format_hint))
        return self.raw


@pytest.fixture
def document_factory():
    """Build a valid document with top-level fields overridden."""
    return make_document


@pytest.fixture
def generator_factory():
    """Build a fake generator returning the given raw text."""
    return FakeGenerator


@pytest.fixture
def site_document() -> dict:
    """Valid generated document as a dict."""
    return make_document()


@pytest.fixture
def fenced_response(site_document) -> str:
    """Valid document wrapped the way the generator usually returns it."""
    return "Here is your site:\n```json\n" + json.dumps(site_document, indent=2) + "\n```\n"


@pytest.fixture
def fake_generator(fenced_response) -> FakeGenerator:
    return FakeGenerator(fenced_response)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def user(db_session: AsyncSession) -> User:
    """Active user without a tenant yet."""
    user = User(
        id=USER_ID,
        email="owner@example.com",
        name="Pet Owner",
        status=UserStatus.ACTIVE,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture(scope="function")
async def user_with_tenant(db_session: AsyncSession) -> User:
    """Active user already attached to a tenant."""
    tenant = Tenant(
        id=TENANT_ID,
        name="Test Tenant",
        slug="test-tenant",
        email="owner@example.com",
        status=TenantStatus.ACTIVE,
        plan="pro",
    )
    db_session.add(tenant)

    user = User(
        id=USER_ID,
        email="owner@example.com",
        name="Pet Owner",
        tenant_id=tenant.id,
        status=UserStatus.ACTIVE,
    )
    db_session.add(user)
    await db_session.commit()
    return user


# ============================================================================
# FastAPI App Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def app(db_session: AsyncSession, fake_generator: FakeGenerator) -> FastAPI:
    """Create test FastAPI application."""
    from sitebuilder.main import app as main_app

    async def override_get_db():
        yield db_session

    main_app.dependency_overrides[get_db] = override_get_db
    main_app.dependency_overrides[get_text_generator] = lambda: fake_generator

    yield main_app

    main_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app: FastAPI) -> TestClient:
    """Create synchronous test client."""
    return TestClient(app)


@pytest_asyncio.fixture(scope="function")
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ============================================================================
# Authentication Fixtures
# ============================================================================

@pytest.fixture
def auth_headers() -> dict:
    """Create authentication headers with a valid test token."""
    from sitebuilder.core.security import create_access_token

    token = create_access_token(data={"sub": str(USER_ID)})
    return {"Authorization": f"Bearer {token}"}
