"""Unique identifier allocation for events and notifications."""

from __future__ import annotations

from abc import ABC, abstractmethod

from core import get_logger
from core.constants import CounterField
from core.exceptions import AllocationFailedError, CounterMissingError, TransactionAbortedError
from database.document_store import DocumentStore, Transaction

logger = get_logger(__name__)


class SequenceService(ABC):
    """Source of unique, increasing integer identifiers."""

    @abstractmethod
    async def allocate_next_id(self, counter_field: CounterField) -> int:
        """Return a value no other caller has received for this counter."""

    async def next_event_id(self) -> int:
        return await self.allocate_next_id(CounterField.EVENT)

    async def next_notification_id(self) -> int:
        return await self.allocate_next_id(CounterField.NOTIFICATION)


class TransactionalCounterSequence(SequenceService):
    """Counter document incremented inside a single-document transaction.

    Every allocation serializes on the one counter document, so concurrent
    callers never share a value.
    """

    def __init__(self, store: DocumentStore, collection: str, document_id: str) -> None:
        self.store = store
        self.collection = collection
        self.document_id = document_id

    async def allocate_next_id(self, counter_field: CounterField) -> int:
        field = CounterField(counter_field).value

        async def body(txn: Transaction) -> int:
            snapshot = await txn.get(self.collection, self.document_id)
            current = snapshot.get(field) if snapshot else None
            if current is None:
                raise CounterMissingError(field)
            new_value = int(current) + 1
            txn.update(self.collection, self.document_id, {field: new_value})
            return new_value

        try:
            value = await self.store.run_transaction(body)
        except TransactionAbortedError as e:
            logger.error(f"Failed to allocate {field}: {e}")
            raise AllocationFailedError(f"Could not allocate {field}: {e}") from e

        logger.debug(f"Allocated {field}={value}")
        return value

    async def ensure_counter_document(self) -> bool:
        """Seed missing counter fields with zero; returns True if anything was written."""

        async def body(txn: Transaction) -> bool:
            snapshot = await txn.get(self.collection, self.document_id) or {}
            missing = {f.value: 0 for f in CounterField if snapshot.get(f.value) is None}
            if not missing:
                return False
            txn.set(self.collection, self.document_id, {**snapshot, **missing})
            return True

        created = await self.store.run_transaction(body)
        if created:
            logger.info(f"Initialized counter document {self.collection}/{self.document_id}")
        return created
