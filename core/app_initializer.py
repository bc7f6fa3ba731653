"""Application initialization orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config import Config, load_config
from core.logger import get_logger
from database import DocumentStorePool, SQLiteDocumentStore, run_migrations
from database.repositories import EventRepository, NotificationRepository, UserRepository
from services import (
    CascadeDeletionCoordinator,
    EntrantStatusService,
    EventService,
    LotteryDrawEngine,
    NotificationService,
    TransactionalCounterSequence,
)

logger = get_logger(__name__)


@dataclass
class Services:
    """Wired service graph handed to whatever front end drives the core."""
    store: SQLiteDocumentStore
    sequence: TransactionalCounterSequence
    events: EventRepository
    users: UserRepository
    notification_records: NotificationRepository
    notifications: NotificationService
    event_service: EventService
    entrants: EntrantStatusService
    lottery: LotteryDrawEngine
    deletion: CascadeDeletionCoordinator


class ApplicationInitializer:
    """Orchestrates application initialization and lifecycle."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or load_config()
        self.db_pool: Optional[DocumentStorePool] = None
        self.services: Optional[Services] = None

    async def initialize(self) -> Services:
        """Initialize all application components."""
        await self._init_database()
        store = SQLiteDocumentStore(
            self.db_pool,
            transaction_attempts=self.config.transaction_attempts,
            retry_delay=self.config.transaction_retry_delay,
        )
        sequence = await self._init_sequence(store)
        self.services = build_services(self.config, store, sequence)
        logger.info("✅ Services initialized")
        return self.services

    async def cleanup(self) -> None:
        """Cleanup resources."""
        if self.db_pool is not None:
            await self.db_pool.close()
        self.db_pool = None
        self.services = None
        logger.info("Database pool closed")

    async def _init_database(self) -> None:
        """Initialize database pool and run migrations."""
        self.db_pool = DocumentStorePool(
            self.config.database_path,
            pool_size=self.config.db_pool_size,
            busy_timeout_ms=self.config.db_busy_timeout,
        )
        await self.db_pool.open()
        await run_migrations(self.db_pool)
        logger.info("✅ Database initialized")

    async def _init_sequence(self, store: SQLiteDocumentStore) -> TransactionalCounterSequence:
        """Create the ID counter and seed it on first run."""
        sequence = TransactionalCounterSequence(
            store, self.config.extras_collection, self.config.counter_document
        )
        if await sequence.ensure_counter_document():
            logger.info("🚀 First run detected, counter document created")
        return sequence


def build_services(config: Config, store: SQLiteDocumentStore, sequence: TransactionalCounterSequence) -> Services:
    """Wire repositories and services over an already prepared store."""
    events = EventRepository(store, config.events_collection)
    users = UserRepository(store, config.users_collection)
    notification_records = NotificationRepository(store, config.notifications_collection)
    notifications = NotificationService(notification_records, sequence, events)
    return Services(
        store=store,
        sequence=sequence,
        events=events,
        users=users,
        notification_records=notification_records,
        notifications=notifications,
        event_service=EventService(events, sequence),
        entrants=EntrantStatusService(events, notifications),
        lottery=LotteryDrawEngine(events, notifications, notify_results=config.lottery_notifications),
        deletion=CascadeDeletionCoordinator(store, events, users),
    )
