"""Base repository pattern for document operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

from core import get_logger
from core.exceptions import NotFoundError, ValidationError
from database.document_store import Document, DocumentRef, DocumentStore

logger = get_logger(__name__)

T = TypeVar('T')


class BaseRepository(ABC, Generic[T]):
    """Typed access to one collection of the document store."""

    def __init__(self, store: DocumentStore, collection: str) -> None:
        self.store = store
        self.collection = collection

    @abstractmethod
    def decode(self, document: Document) -> T:
        """Build a record from a stored document."""

    @abstractmethod
    def encode(self, record: T) -> Document:
        """Serialize a record into a document."""

    @abstractmethod
    def key(self, record: T) -> object:
        """Document ID of a record."""

    def ref(self, doc_id: object) -> DocumentRef:
        return DocumentRef.of(self.collection, doc_id)

    async def find(self, doc_id: object) -> Optional[T]:
        """Fetch a record, or None when the document does not exist."""
        document = await self.store.get(self.collection, doc_id)
        if document is None:
            return None
        return self.decode(document)

    async def get(self, doc_id: object) -> T:
        """Fetch a record; absent documents raise NotFoundError."""
        record = await self.find(doc_id)
        if record is None:
            logger.warning(f"Document doesn't exist: {self.collection}/{doc_id}")
            raise NotFoundError(self.collection, doc_id)
        return record

    async def exists(self, doc_id: object) -> bool:
        return await self.store.get(self.collection, doc_id) is not None

    async def save(self, record: T) -> None:
        """Create or fully overwrite the record's document."""
        await self.store.set(self.collection, self.key(record), self.encode(record))

    async def delete(self, doc_id: object) -> None:
        await self.store.delete(self.collection, doc_id)

    async def list_all(self) -> List[T]:
        """Every record in the collection; malformed documents are skipped."""
        return self._decode_rows(await self.store.list(self.collection))

    async def find_by(self, field: str, value: Any) -> List[T]:
        return self._decode_rows(await self.store.query(self.collection, field, value))

    def _decode_rows(self, rows: List[tuple[str, Document]]) -> List[T]:
        records: List[T] = []
        for doc_id, document in rows:
            try:
                records.append(self.decode(document))
            except ValidationError as e:
                logger.error(f"Skipping malformed document {self.collection}/{doc_id}: {e}")
        return records
