"""Document store gateway.

The rest of the application sees the store only through :class:`DocumentStore`:
single-document get/set/delete, equality queries, all-or-nothing batch
deletes, single-document read-modify-write transactions and atomic
array-membership updates. :class:`SQLiteDocumentStore` implements it on one
JSON ``documents`` table.
"""

from __future__ import annotations

import asyncio
import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

import aiosqlite

from core import get_logger
from core.constants import StoreDefaults
from core.exceptions import NotFoundError, PersistenceError, TransactionAbortedError, ValidationError
from database.connection import DocumentStorePool

logger = get_logger(__name__)

T = TypeVar("T")
Document = Dict[str, Any]

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class DocumentRef:
    """Address of one document."""
    collection: str
    doc_id: str

    @classmethod
    def of(cls, collection: str, doc_id: object) -> "DocumentRef":
        return cls(collection, str(doc_id))


def _field_path(field: str) -> str:
    if not _FIELD_RE.match(field):
        raise ValidationError(f"Invalid document field name: {field!r}")
    return f"$.{field}"


def _normalize(value: Any) -> Any:
    """Round-trip through JSON so equality matches what is stored."""
    return json.loads(json.dumps(value))


def _dumps(document: Document) -> str:
    return json.dumps(document, ensure_ascii=False)


def _is_contention(exc: BaseException) -> bool:
    message = str(exc).lower()
    return "locked" in message or "busy" in message


class Transaction:
    """Read-modify-write scope handed to ``run_transaction`` bodies.

    Reads go straight to the connection; writes are buffered and applied
    when the body returns, so a body that raises leaves nothing behind.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn
        self._writes: List[Tuple[str, DocumentRef, Optional[Document]]] = []

    async def get(self, collection: str, doc_id: object) -> Optional[Document]:
        cursor = await self._conn.execute(
            "SELECT body FROM documents WHERE collection=? AND doc_id=?",
            (collection, str(doc_id)),
        )
        row = await cursor.fetchone()
        return json.loads(row[0]) if row else None

    def set(self, collection: str, doc_id: object, document: Document) -> None:
        self._writes.append(("set", DocumentRef.of(collection, doc_id), dict(document)))

    def update(self, collection: str, doc_id: object, fields: Document) -> None:
        self._writes.append(("update", DocumentRef.of(collection, doc_id), dict(fields)))

    def delete(self, collection: str, doc_id: object) -> None:
        self._writes.append(("delete", DocumentRef.of(collection, doc_id), None))

    async def _flush(self) -> None:
        for op, ref, payload in self._writes:
            if op == "delete":
                await self._conn.execute(
                    "DELETE FROM documents WHERE collection=? AND doc_id=?",
                    (ref.collection, ref.doc_id),
                )
                continue
            if op == "update":
                current = await self.get(ref.collection, ref.doc_id)
                if current is None:
                    raise NotFoundError(ref.collection, ref.doc_id)
                current.update(payload)
                payload = current
            await self._conn.execute(
                """
                INSERT INTO documents (collection, doc_id, body) VALUES (?, ?, ?)
                ON CONFLICT(collection, doc_id) DO UPDATE SET
                    body=excluded.body,
                    updated_at=CURRENT_TIMESTAMP
                """,
                (ref.collection, ref.doc_id, _dumps(payload)),
            )
        self._writes.clear()


TransactionBody = Callable[[Transaction], Awaitable[T]]


class DocumentStore(ABC):
    """Client interface of the shared document store."""

    @abstractmethod
    async def get(self, collection: str, doc_id: object) -> Optional[Document]:
        """Return the document, or None when it does not exist."""

    @abstractmethod
    async def set(self, collection: str, doc_id: object, document: Document) -> None:
        """Create or fully overwrite a document."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: object) -> None:
        """Delete a document; deleting a missing document is not an error."""

    @abstractmethod
    async def query(self, collection: str, field: str, value: Any) -> List[Tuple[str, Document]]:
        """Return ``(doc_id, document)`` pairs whose top-level field equals value."""

    @abstractmethod
    async def list(self, collection: str) -> List[Tuple[str, Document]]:
        """Return every ``(doc_id, document)`` pair in a collection."""

    @abstractmethod
    async def batch_delete(self, refs: Iterable[DocumentRef]) -> None:
        """Delete all referenced documents in one all-or-nothing commit."""

    @abstractmethod
    async def run_transaction(self, fn: TransactionBody) -> T:
        """Run a retryable read-modify-write body and return its result."""

    @abstractmethod
    async def array_union(self, collection: str, doc_id: object, field: str, elements: Iterable[Any]) -> None:
        """Append each element not already present in the array field."""

    @abstractmethod
    async def array_remove(self, collection: str, doc_id: object, field: str, elements: Iterable[Any]) -> None:
        """Remove every occurrence of each element from the array field."""


class SQLiteDocumentStore(DocumentStore):
    """Document store on a SQLite ``documents`` table."""

    def __init__(
        self,
        pool: DocumentStorePool,
        transaction_attempts: int = StoreDefaults.TRANSACTION_ATTEMPTS,
        retry_delay: float = StoreDefaults.RETRY_DELAY,
    ) -> None:
        self.pool = pool
        self.transaction_attempts = transaction_attempts
        self.retry_delay = retry_delay

    async def get(self, collection: str, doc_id: object) -> Optional[Document]:
        try:
            async with self.pool.connection() as conn:
                cursor = await conn.execute(
                    "SELECT body FROM documents WHERE collection=? AND doc_id=?",
                    (collection, str(doc_id)),
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to read {collection}/{doc_id}: {e}") from e
        return json.loads(row[0]) if row else None

    async def set(self, collection: str, doc_id: object, document: Document) -> None:
        try:
            async with self.pool.connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO documents (collection, doc_id, body) VALUES (?, ?, ?)
                    ON CONFLICT(collection, doc_id) DO UPDATE SET
                        body=excluded.body,
                        updated_at=CURRENT_TIMESTAMP
                    """,
                    (collection, str(doc_id), _dumps(document)),
                )
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to write {collection}/{doc_id}: {e}") from e

    async def delete(self, collection: str, doc_id: object) -> None:
        try:
            async with self.pool.connection() as conn:
                await conn.execute(
                    "DELETE FROM documents WHERE collection=? AND doc_id=?",
                    (collection, str(doc_id)),
                )
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to delete {collection}/{doc_id}: {e}") from e

    async def query(self, collection: str, field: str, value: Any) -> List[Tuple[str, Document]]:
        path = _field_path(field)
        try:
            async with self.pool.connection() as conn:
                cursor = await conn.execute(
                    f"SELECT doc_id, body FROM documents "
                    f"WHERE collection=? AND json_extract(body, '{path}')=? ORDER BY rowid",
                    (collection, value),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to query {collection} by {field}: {e}") from e
        return [(doc_id, json.loads(body)) for doc_id, body in rows]

    async def list(self, collection: str) -> List[Tuple[str, Document]]:
        try:
            async with self.pool.connection() as conn:
                cursor = await conn.execute(
                    "SELECT doc_id, body FROM documents WHERE collection=? ORDER BY rowid",
                    (collection,),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to list {collection}: {e}") from e
        return [(doc_id, json.loads(body)) for doc_id, body in rows]

    async def run_transaction(self, fn: TransactionBody) -> T:
        delay = self.retry_delay
        for attempt in range(1, self.transaction_attempts + 1):
            try:
                async with self.pool.connection() as conn:
                    return await self._run_once(conn, fn)
            except aiosqlite.OperationalError as e:
                if not _is_contention(e):
                    raise PersistenceError(f"Transaction failed: {e}") from e
                logger.warning(
                    f"Transaction contention on attempt {attempt}/{self.transaction_attempts}: {e}",
                    extra={"attempt": attempt},
                )
                if attempt < self.transaction_attempts:
                    await asyncio.sleep(delay)
                    delay *= 2
            except aiosqlite.Error as e:
                raise PersistenceError(f"Transaction failed: {e}") from e
        raise TransactionAbortedError(
            f"Transaction aborted after {self.transaction_attempts} attempts"
        )

    @staticmethod
    async def _run_once(conn: aiosqlite.Connection, fn: TransactionBody) -> T:
        await conn.execute("BEGIN IMMEDIATE")
        try:
            txn = Transaction(conn)
            result = await fn(txn)
            await txn._flush()
            await conn.commit()
        except BaseException:
            await conn.rollback()
            raise
        return result

    async def batch_delete(self, refs: Iterable[DocumentRef]) -> None:
        refs = list(refs)
        if not refs:
            return

        async def body(txn: Transaction) -> None:
            for ref in refs:
                txn.delete(ref.collection, ref.doc_id)

        await self.run_transaction(body)
        logger.info(f"Batch deleted {len(refs)} documents")

    async def array_union(self, collection: str, doc_id: object, field: str, elements: Iterable[Any]) -> None:
        additions = [_normalize(element) for element in elements]
        _field_path(field)

        async def body(txn: Transaction) -> None:
            current = await txn.get(collection, doc_id)
            if current is None:
                raise NotFoundError(collection, doc_id)
            values = list(current.get(field) or [])
            for element in additions:
                if element not in values:
                    values.append(element)
            txn.update(collection, doc_id, {field: values})

        await self.run_transaction(body)

    async def array_remove(self, collection: str, doc_id: object, field: str, elements: Iterable[Any]) -> None:
        removals = [_normalize(element) for element in elements]
        _field_path(field)

        async def body(txn: Transaction) -> None:
            current = await txn.get(collection, doc_id)
            if current is None:
                raise NotFoundError(collection, doc_id)
            values = [value for value in (current.get(field) or []) if value not in removals]
            txn.update(collection, doc_id, {field: values})

        await self.run_transaction(body)
