"""Tests for typed repositories."""

import pytest

from core.exceptions import NotFoundError
from database.models import Entrant, Notification, Organizer


@pytest.mark.asyncio
async def test_deleted_records_raise_not_found(services, make_event):
    """Test fetching a deleted event, user or notification raises NotFoundError."""
    event = await make_event()
    await services.users.save(Entrant("e1"))
    note = await services.notifications.send("org-1", "e1", "Hi", "Body")

    await services.events.delete(event.event_id)
    await services.users.delete("e1")
    await services.notification_records.delete(note.notification_id)

    with pytest.raises(NotFoundError) as exc_info:
        await services.events.get(event.event_id)
    assert exc_info.value.collection == "events"
    with pytest.raises(NotFoundError):
        await services.users.get("e1")
    with pytest.raises(NotFoundError):
        await services.notification_records.get(note.notification_id)


@pytest.mark.asyncio
async def test_find_and_exists(services):
    """Test find returns None and exists reports absence."""
    assert await services.users.find("nobody") is None
    assert await services.users.exists("nobody") is False

    await services.users.save(Organizer("org-9"))
    assert await services.users.exists("org-9") is True


@pytest.mark.asyncio
async def test_list_all_skips_malformed_documents(services, store):
    """Test one broken document does not hide the rest."""
    await services.users.save(Entrant("good"))
    await store.set("users", "broken", {"userType": "MARTIAN", "hardwareID": "broken"})

    users = await services.users.list_all()

    assert [u.hardware_id for u in users] == ["good"]


@pytest.mark.asyncio
async def test_list_organizers(services):
    """Test organizer listing filters by variant."""
    await services.users.save(Entrant("e1"))
    await services.users.save(Organizer("o1"))

    assert [u.hardware_id for u in await services.users.list_organizers()] == ["o1"]


@pytest.mark.asyncio
async def test_list_for_receiver_newest_first(services):
    """Test receiver listing sorts by descending ID and can hide dismissed."""
    repo = services.notification_records
    for notification_id, dismissed in ((1, False), (3, True), (2, False)):
        await repo.save(Notification(notification_id, "org", "e1", "h", "b", dismissed=dismissed))
    await repo.save(Notification(4, "org", "e2", "h", "b"))

    all_ids = [n.notification_id for n in await repo.list_for_receiver("e1")]
    open_ids = [n.notification_id for n in await repo.list_for_receiver("e1", include_dismissed=False)]

    assert all_ids == [3, 2, 1]
    assert open_ids == [2, 1]


@pytest.mark.asyncio
async def test_set_dismissed_only_touches_flag(services):
    """Test dismissing keeps the rest of the notification."""
    repo = services.notification_records
    await repo.save(Notification(1, "org", "e1", "Header", "Body", event_id=7))

    await repo.set_dismissed(1)

    stored = await repo.get(1)
    assert stored.dismissed is True
    assert stored.header == "Header"
    assert stored.event_id == 7


@pytest.mark.asyncio
async def test_set_dismissed_missing(services):
    """Test dismissing an unknown notification raises NotFoundError."""
    with pytest.raises(NotFoundError):
        await services.notification_records.set_dismissed(99)
