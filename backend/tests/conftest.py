"""Root conftest — shared test configuration and fixtures.

Invariants:
    - Tests never reach a real bank API: every BankApiClient runs on FakeBank
    - Every test gets a fresh in-memory SQLite database with the schema created
    - wired_bus has all workers registered with today pinned to TODAY

Design Decisions:
    - SQLite in-memory via aiosqlite with StaticPool: one shared connection,
      so every session sees the same database
    - Fixtures shared by services/ and api/ live here
"""

import os

# Ensure tests don't accidentally use real credentials
os.environ.setdefault("BANK_API_KEY", "test-api-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from conto.db.base import Base
from conto.infrastructure.database import DatabaseSessionManager
from conto.infrastructure.dispatch_bus import DispatchBus
from conto.models.bank_transaction import BankTransaction
from conto.services.worker_registry import register_workers

from tests.fake_bank import TODAY, FakeBank


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def db_manager(test_engine):
    return DatabaseSessionManager.from_engine(test_engine)


@pytest.fixture
def fake_bank():
    return FakeBank()


@pytest.fixture
async def bank_client(fake_bank):
    client = fake_bank.client()
    yield client
    await client.aclose()


@pytest.fixture
def bus():
    return DispatchBus(default_timeout=5.0)


@pytest.fixture
async def wired_bus(bus, bank_client, db_manager):
    register_workers(bus, bank_client, db_manager, today=lambda: TODAY)
    yield bus
    await bus.drain()


@pytest.fixture
def stored_transactions(db_manager):
    """Return an async callable listing stored rows ordered by id."""
    async def _stored() -> list[BankTransaction]:
        async with db_manager.session() as db:
            result = await db.execute(
                select(BankTransaction).order_by(BankTransaction.transaction_id),
            )
            return list(result.scalars().all())
    return _stored
