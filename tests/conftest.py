# tests/conftest.py
import os

# Must be set before app.database builds its engine
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RECOVER_STUCK_MIGRATIONS"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.enums import MarketplaceName
from app.database import Base
from app.main import app
from app.services.mapping import AttributeResolver, CategoryResolver, ProductTransformer
from app.services.migration_service import MigrationService
from app.services.storage import MappingStorage
from tests.mocks.mock_marketplace import MockMarketplaceClient
from tests.mocks.mock_storage import MockStorage

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """In-memory SQLite engine with all tables created (function-scoped)."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Provide a database session for tests"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(db_session):
    return MappingStorage(db_session)


@pytest.fixture
def mock_storage():
    return MockStorage()


@pytest.fixture
def ozon_client():
    return MockMarketplaceClient(MarketplaceName.OZON)


@pytest.fixture
def wildberries_client():
    return MockMarketplaceClient(MarketplaceName.WILDBERRIES)


def build_service(storage, ozon_client, wildberries_client) -> MigrationService:
    transformer = ProductTransformer(CategoryResolver(storage), AttributeResolver(storage))
    return MigrationService(storage, transformer, ozon_client, wildberries_client)


@pytest.fixture
def migration_service(mock_storage, ozon_client, wildberries_client):
    return build_service(mock_storage, ozon_client, wildberries_client)


@pytest.fixture
def test_client():
    """TestClient without lifespan; tests override dependencies as needed"""
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
