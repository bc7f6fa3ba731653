"""Database schema migrations."""

from __future__ import annotations

from typing import Iterable

from core import get_logger

from .connection import DocumentStorePool

logger = get_logger(__name__)


SCHEMA_SQL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS documents (
        collection TEXT NOT NULL,
        doc_id TEXT NOT NULL,
        body TEXT NOT NULL,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        PRIMARY KEY (collection, doc_id)
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents(collection);",
    # Cascade lookups query events by owner
    """
    CREATE INDEX IF NOT EXISTS idx_documents_event_owner
    ON documents(collection, json_extract(body, '$.eventOrganizerHardwareID'));
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_documents_notification_receiver
    ON documents(collection, json_extract(body, '$.receivingUserHardwareID'));
    """,
)


async def _apply(pool: DocumentStorePool, statements: Iterable[str]) -> None:
    async with pool.connection() as conn:
        await conn.execute("BEGIN")
        try:
            for statement in statements:
                await conn.execute(statement)
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise


async def run_migrations(pool: DocumentStorePool) -> None:
    """Create the document table and its indexes if missing."""
    await _apply(pool, SCHEMA_SQL)
    logger.info("Document store schema ensured")
