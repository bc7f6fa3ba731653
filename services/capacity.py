"""Waitlist capacity gate."""

from __future__ import annotations

from typing import Optional

from core.constants import CapacityStatus
from core.exceptions import CapacityExceededError
from database.models import Event


def check_capacity(event: Event) -> CapacityStatus:
    """Each entrant occupies one slot, however many entries their joins left."""
    if event.waitlist_capacity is not None and len(event.waitlisted_ids()) >= event.waitlist_capacity:
        return CapacityStatus.FULL
    return CapacityStatus.HAS_ROOM


def remaining_slots(event: Event) -> Optional[int]:
    """Free waitlist places, or None when the waitlist is unlimited."""
    if event.waitlist_capacity is None:
        return None
    return max(event.waitlist_capacity - len(event.waitlisted_ids()), 0)


def require_room(event: Event) -> None:
    if check_capacity(event) is CapacityStatus.FULL:
        raise CapacityExceededError(
            f"Waitlist for event {event.event_id} is full ({event.waitlist_capacity})"
        )
