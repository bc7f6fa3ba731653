"""Tests for unique identifier allocation."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from core.constants import CounterField
from core.exceptions import AllocationFailedError, CounterMissingError, TransactionAbortedError
from services import TransactionalCounterSequence


@pytest.mark.asyncio
async def test_allocations_start_after_seed(sequence):
    """Test a fresh counter hands out 1, 2, 3."""
    assert [await sequence.next_event_id() for _ in range(3)] == [1, 2, 3]


@pytest.mark.asyncio
async def test_counters_are_independent(sequence):
    """Test event and notification counters advance separately."""
    await sequence.next_event_id()
    await sequence.next_event_id()

    assert await sequence.next_notification_id() == 1
    assert await sequence.next_event_id() == 3


@pytest.mark.asyncio
async def test_concurrent_allocations_are_distinct_and_consecutive(sequence):
    """Test N concurrent allocations return N distinct consecutive values."""
    n = 25
    values = await asyncio.gather(*(sequence.allocate_next_id(CounterField.EVENT) for _ in range(n)))

    assert sorted(values) == list(range(1, n + 1))


@pytest.mark.asyncio
async def test_missing_counter_document(store):
    """Test allocation without a seeded counter fails without writing."""
    seq = TransactionalCounterSequence(store, "extras", "uniqueIdentifierData")

    with pytest.raises(CounterMissingError) as exc_info:
        await seq.next_event_id()

    assert exc_info.value.field == "curEvent"
    assert await store.get("extras", "uniqueIdentifierData") is None


@pytest.mark.asyncio
async def test_missing_counter_field(store):
    """Test a counter document lacking one field only fails that field."""
    await store.set("extras", "uniqueIdentifierData", {"curEvent": 7})
    seq = TransactionalCounterSequence(store, "extras", "uniqueIdentifierData")

    assert await seq.next_event_id() == 8
    with pytest.raises(CounterMissingError):
        await seq.next_notification_id()


@pytest.mark.asyncio
async def test_ensure_counter_document_keeps_existing_values(store):
    """Test seeding only fills absent fields."""
    await store.set("extras", "uniqueIdentifierData", {"curEvent": 41})
    seq = TransactionalCounterSequence(store, "extras", "uniqueIdentifierData")

    assert await seq.ensure_counter_document() is True
    assert await seq.ensure_counter_document() is False
    assert await store.get("extras", "uniqueIdentifierData") == {"curEvent": 41, "curNotification": 0}


@pytest.mark.asyncio
async def test_aborted_transaction_becomes_allocation_failure(sequence):
    """Test an exhausted transaction surfaces as AllocationFailedError."""
    with patch.object(
        sequence.store, "run_transaction",
        AsyncMock(side_effect=TransactionAbortedError("contention")),
    ):
        with pytest.raises(AllocationFailedError):
            await sequence.next_event_id()
