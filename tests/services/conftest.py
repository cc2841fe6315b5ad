"""Service test fixtures — async DB, seeded campaigns, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test session factory
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency; the unique constraint and
      GROUP BY queries behave the same as on PostgreSQL
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from freecredit.db.base import Base
from freecredit.infrastructure.database import get_db, DatabaseSessionManager
import freecredit.infrastructure.database as db_module
from freecredit.main import app
from freecredit.models import Campaign
from freecredit.services.reaction_service import ReactionService


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def service(test_db):
    return ReactionService(test_db)


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_campaign(test_db):
    """Insert a campaign row; published and live unless told otherwise."""
    async def _make(
        status: str = "published",
        deleted: bool = False,
        needs_verification: bool = False,
    ) -> Campaign:
        campaign = Campaign(
            slug=f"campaign-{uuid4().hex[:10]}",
            status=status,
            needs_verification=needs_verification,
            deleted_at=datetime.now(timezone.utc) if deleted else None,
        )
        test_db.add(campaign)
        await test_db.commit()
        await test_db.refresh(campaign)
        return campaign

    return _make
