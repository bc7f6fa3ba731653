"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from config import Config
from core.app_initializer import Services, build_services
from database import DocumentStorePool, SQLiteDocumentStore, run_migrations
from services import TransactionalCounterSequence

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_config(tmp_path) -> Config:
    """Config pointing at a throwaway database."""
    return Config(
        environment="test",
        debug=True,
        log_level="DEBUG",
        log_folder=str(tmp_path / "logs"),
        database_path=str(tmp_path / "test_waitlist.sqlite"),
        db_pool_size=4,
        db_busy_timeout=5000,
        transaction_attempts=5,
        transaction_retry_delay=0.01,
        lottery_notifications=True,
    )


@pytest_asyncio.fixture
async def db_pool(test_config):
    """Initialized pool with the schema applied."""
    pool = DocumentStorePool(
        test_config.database_path,
        pool_size=test_config.db_pool_size,
        busy_timeout_ms=test_config.db_busy_timeout,
    )
    await pool.open()
    await run_migrations(pool)
    yield pool
    await pool.close()


@pytest_asyncio.fixture
async def store(db_pool, test_config) -> SQLiteDocumentStore:
    return SQLiteDocumentStore(
        db_pool,
        transaction_attempts=test_config.transaction_attempts,
        retry_delay=test_config.transaction_retry_delay,
    )


@pytest_asyncio.fixture
async def sequence(store, test_config) -> TransactionalCounterSequence:
    """Counter sequence with a freshly seeded counter document."""
    seq = TransactionalCounterSequence(store, test_config.extras_collection, test_config.counter_document)
    await seq.ensure_counter_document()
    return seq


@pytest_asyncio.fixture
async def services(test_config, store, sequence) -> Services:
    return build_services(test_config, store, sequence)


@pytest.fixture
def make_event(services):
    """Factory creating events whose registration window contains NOW."""

    async def factory(organizer_id="org-1", name="Swim Lessons", **kwargs):
        kwargs.setdefault("registration_start", NOW - timedelta(days=1))
        kwargs.setdefault("registration_end", NOW + timedelta(days=1))
        return await services.event_service.create_event(organizer_id, name, **kwargs)

    return factory


@pytest.fixture
def join(services):
    """Join helper that pins the clock to NOW."""

    async def joiner(event_id, *entrant_ids):
        for entrant_id in entrant_ids:
            await services.entrants.join_waitlist(event_id, entrant_id, now=NOW)

    return joiner
