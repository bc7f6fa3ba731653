"""Tests for the event and notification services."""

from datetime import date, datetime, timezone

import pytest

from core.constants import EntrantStatus
from core.exceptions import NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_create_event_allocates_ids(services):
    """Test new events get consecutive IDs and are stored."""
    first = await services.event_service.create_event("org-1", "A")
    second = await services.event_service.create_event("org-1", "B")

    assert (first.event_id, second.event_id) == (1, 2)
    assert (await services.event_service.get_event(2)).name == "B"


@pytest.mark.asyncio
async def test_create_event_expands_whole_days(services):
    """Test bare dates become whole-day registration bounds."""
    event = await services.event_service.create_event(
        "org-1", "Gala",
        registration_start=date(2025, 5, 1),
        registration_end=date(2025, 5, 3),
    )

    assert event.registration_start == datetime(2025, 5, 1, tzinfo=timezone.utc)
    assert event.registration_end == datetime(2025, 5, 3, 23, 59, 59, 999000, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_single_day_window_is_valid(services):
    """Test start and end on the same day is accepted."""
    day = date(2025, 5, 1)
    event = await services.event_service.create_event("org-1", "Gala", registration_start=day, registration_end=day)
    assert event.registration_start < event.registration_end


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": "   "},
        {"registration_start": date(2025, 5, 3), "registration_end": date(2025, 5, 1)},
        {"waitlist_capacity": 0},
    ],
)
async def test_create_event_validation(services, kwargs):
    """Test invalid events are rejected before an ID is allocated."""
    params = {"name": "Valid"}
    params.update(kwargs)

    with pytest.raises(ValidationError):
        await services.event_service.create_event("org-1", **params)

    assert await services.sequence.next_event_id() == 1


@pytest.mark.asyncio
async def test_list_events_by_organizer(services, make_event):
    """Test organizer listing returns only their events."""
    await make_event("org-1", "A")
    await make_event("org-2", "B")
    await make_event("org-1", "C")

    names = [e.name for e in await services.event_service.list_events_by_organizer("org-1")]

    assert sorted(names) == ["A", "C"]
    assert len(await services.event_service.list_events()) == 3


@pytest.mark.asyncio
async def test_update_details_keeps_membership(services, make_event, join):
    """Test descriptive edits leave entrants untouched."""
    event = await make_event()
    await join(event.event_id, "e1")

    updated = await services.event_service.update_details(
        event.event_id, name=" Deep Water ", location="Pool B"
    )

    stored = await services.event_service.get_event(event.event_id)
    assert updated.name == stored.name == "Deep Water"
    assert stored.location == "Pool B"
    assert stored.waitlisted_ids() == ["e1"]


@pytest.mark.asyncio
async def test_update_details_rejects_structural_fields(services, make_event):
    """Test membership and capacity cannot be edited as details."""
    event = await make_event()

    with pytest.raises(ValidationError):
        await services.event_service.update_details(event.event_id, accepted=["x"])
    with pytest.raises(ValidationError):
        await services.event_service.update_details(event.event_id, waitlist_capacity=5)


@pytest.mark.asyncio
async def test_delete_event(services, make_event):
    """Test deleted events are gone and a second delete fails."""
    event = await make_event()

    await services.event_service.delete_event(event.event_id)

    with pytest.raises(NotFoundError):
        await services.event_service.get_event(event.event_id)
    with pytest.raises(NotFoundError):
        await services.event_service.delete_event(event.event_id)


@pytest.mark.asyncio
async def test_send_allocates_notification_ids(services):
    """Test each notification receives its own ID."""
    first = await services.notifications.send("org-1", "e1", "Hello", "Body")
    second = await services.notifications.send("org-1", "e1", "Again", "Body")

    assert (first.notification_id, second.notification_id) == (1, 2)
    assert (await services.notifications.get(1)).header == "Hello"


@pytest.mark.asyncio
async def test_send_requires_receiver(services):
    """Test an empty receiver is rejected."""
    with pytest.raises(ValidationError):
        await services.notifications.send("org-1", "", "h", "b")


@pytest.mark.asyncio
async def test_send_bulk_counts_failures(services):
    """Test bulk sending reports per-receiver outcome."""
    result = await services.notifications.send_bulk("org-1", ["a", "", "b"], "h", "b")

    assert result.success_count == 2
    assert result.failed == [""]


@pytest.mark.asyncio
async def test_notify_group(services, make_event, join):
    """Test group messages reach only entrants in that status."""
    event = await make_event()
    await join(event.event_id, "a", "b", "c")
    drawn = await services.lottery.draw(event.event_id, 1, notify=False)

    result = await services.notifications.notify_group(
        "org-1", event.event_id, EntrantStatus.WAITLISTED, "Reminder", "Still waiting"
    )

    assert sorted(n.receiver_id for n in result.sent) == sorted(drawn.remaining_ids)
    with pytest.raises(ValidationError):
        await services.notifications.notify_group("org-1", event.event_id, EntrantStatus.NONE, "h", "b")


@pytest.mark.asyncio
async def test_dismiss_and_delete(services):
    """Test dismissing hides from the open list and delete removes."""
    note = await services.notifications.send("org-1", "e1", "h", "b")

    await services.notifications.dismiss(note.notification_id)
    assert await services.notifications.list_for_receiver("e1", include_dismissed=False) == []

    await services.notifications.delete(note.notification_id)
    assert await services.notifications.list_all() == []
