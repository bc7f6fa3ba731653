"""Tests for organizer cascade deletion."""

from unittest.mock import AsyncMock, patch

import pytest

from core.exceptions import NotFoundError, PersistenceError
from database.models import Administrator, Entrant, Organizer


@pytest.mark.asyncio
async def test_cascade_removes_owned_events_and_profile(services, make_event):
    """Test both owned events go, the unrelated event stays, the profile goes."""
    await services.users.save(Organizer("org-1", "Olive"))
    first = await make_event("org-1", "A")
    second = await make_event("org-1", "B")
    other = await make_event("org-2", "C")

    deleted = await services.deletion.delete_organizer_cascade("org-1")

    assert sorted(deleted) == sorted([str(first.event_id), str(second.event_id)])
    assert await services.events.find(first.event_id) is None
    assert await services.events.find(second.event_id) is None
    assert await services.events.find(other.event_id) is not None
    assert await services.users.find("org-1") is None


@pytest.mark.asyncio
async def test_cascade_deletes_undecodable_owned_event(services, make_event):
    """Test an owned event that no longer decodes is deleted with the rest."""
    await services.users.save(Organizer("org-1"))
    event = await make_event("org-1")
    broken = event.to_document()
    broken["uniqueEventID"] = 9999
    broken["waitlistLimit"] = "unlimited"
    await services.store.set(services.events.collection, 9999, broken)
    assert len(await services.events.list_by_organizer("org-1")) == 1

    deleted = await services.deletion.delete_organizer_cascade("org-1")

    assert sorted(deleted) == sorted([str(event.event_id), "9999"])
    assert await services.store.get(services.events.collection, 9999) is None
    assert await services.store.query(services.events.collection, "eventOrganizerHardwareID", "org-1") == []
    assert await services.users.find("org-1") is None


@pytest.mark.asyncio
async def test_cascade_without_events_deletes_profile(services):
    """Test an organizer with no events still loses the profile."""
    await services.users.save(Organizer("org-1"))

    with patch.object(services.store, "batch_delete", AsyncMock()) as batch_delete:
        assert await services.deletion.delete_organizer_cascade("org-1") == []

    batch_delete.assert_not_awaited()
    assert await services.users.find("org-1") is None


@pytest.mark.asyncio
async def test_failed_batch_keeps_profile(services, make_event):
    """Test the profile survives when the event batch fails."""
    await services.users.save(Organizer("org-1"))
    event = await make_event("org-1")

    with patch.object(services.store, "batch_delete", AsyncMock(side_effect=PersistenceError("offline"))):
        with pytest.raises(PersistenceError):
            await services.deletion.delete_organizer_cascade("org-1")

    assert await services.users.find("org-1") is not None
    assert await services.events.find(event.event_id) is not None


@pytest.mark.asyncio
async def test_delete_user_dispatches_on_variant(services, make_event):
    """Test organizers cascade while other users only lose their profile."""
    await services.users.save(Organizer("org-1"))
    await services.users.save(Entrant("ent-1", "Ed"))
    await services.users.save(Administrator("adm-1"))
    event = await make_event("org-1")
    await make_event("ent-1", "Owned by id only")

    assert await services.deletion.delete_user("org-1") == [str(event.event_id)]
    assert await services.deletion.delete_user("ent-1") == []
    assert await services.deletion.delete_user("adm-1") == []

    assert await services.users.list_all() == []
    assert len(await services.events.list_by_organizer("ent-1")) == 1


@pytest.mark.asyncio
async def test_delete_missing_user(services):
    """Test deleting an unknown user raises NotFoundError."""
    with pytest.raises(NotFoundError):
        await services.deletion.delete_user("ghost")


@pytest.mark.asyncio
async def test_cascade_keeps_notifications(services, make_event, join):
    """Test notifications about deleted events are not cascaded."""
    await services.users.save(Organizer("org-1"))
    event = await make_event("org-1")
    await join(event.event_id, "e1")
    await services.lottery.draw(event.event_id, 1)

    await services.deletion.delete_user("org-1")

    assert len(await services.notifications.list_for_receiver("e1")) == 1
