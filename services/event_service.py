"""Service for creating, reading and editing events."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from core import get_logger
from core.exceptions import ValidationError
from database.models import Event
from database.repositories import EventRepository
from services.sequence import SequenceService
from utils.dates import DateLike, ensure_utc, window_end, window_start

logger = get_logger(__name__)

# Fields an organizer may change after creation
EDITABLE_FIELDS = frozenset({
    "name",
    "description",
    "location",
    "start_time",
    "poster_url",
    "lottery_criteria",
    "requires_geolocation",
})


class EventService:
    """Service for event records."""

    def __init__(self, events: EventRepository, sequence: SequenceService) -> None:
        self.events = events
        self.sequence = sequence

    async def create_event(
        self,
        organizer_id: str,
        name: str,
        description: str = "",
        location: str = "",
        start_time: Optional[datetime] = None,
        registration_start: Optional[DateLike] = None,
        registration_end: Optional[DateLike] = None,
        waitlist_capacity: Optional[int] = None,
        lottery_criteria: Optional[str] = None,
        poster_url: Optional[str] = None,
        requires_geolocation: bool = False,
    ) -> Event:
        """Validate, allocate an ID for and store a new event.

        Bare dates given as registration bounds cover the whole day: the start
        opens at midnight and the end closes at 23:59:59.999.

        Raises:
            ValidationError: Empty name or organizer, start after end, or a
                capacity below one
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Event name cannot be empty")
        if not organizer_id:
            raise ValidationError("Event organizer cannot be empty")

        opens = window_start(registration_start)
        closes = window_end(registration_end)
        if opens is not None and closes is not None and opens > closes:
            raise ValidationError("Registration start must not be after registration end")

        if waitlist_capacity is not None and waitlist_capacity <= 0:
            raise ValidationError("Waitlist capacity must be greater than 0")

        event_id = await self.sequence.next_event_id()
        event = Event(
            event_id=event_id,
            name=name,
            organizer_id=organizer_id,
            description=description,
            location=location,
            start_time=ensure_utc(start_time) if start_time is not None else None,
            registration_start=opens,
            registration_end=closes,
            poster_url=poster_url,
            lottery_criteria=lottery_criteria,
            waitlist_capacity=waitlist_capacity,
            requires_geolocation=requires_geolocation,
        )
        await self.events.save(event)
        logger.info(
            f"Event {event_id} '{name}' created by {organizer_id}",
            extra={"event_id": event_id, "organizer_id": organizer_id},
        )
        return event

    async def get_event(self, event_id: int) -> Event:
        return await self.events.get(event_id)

    async def list_events(self) -> List[Event]:
        return await self.events.list_all()

    async def list_events_by_organizer(self, organizer_id: str) -> List[Event]:
        return await self.events.list_by_organizer(organizer_id)

    async def update_details(self, event_id: int, **changes) -> Event:
        """Apply owner edits to descriptive fields.

        Membership collections, registration bounds and capacity are not
        editable here.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationError("Event name cannot be empty")

        event = await self.events.get(event_id)
        for field_name, value in changes.items():
            if field_name == "start_time" and value is not None:
                value = ensure_utc(value)
            elif field_name == "name":
                value = value.strip()
            setattr(event, field_name, value)

        await self.events.save(event)
        logger.info(f"Event {event_id} updated: {', '.join(sorted(changes))}")
        return event

    async def delete_event(self, event_id: int) -> None:
        """Delete one event; notifications referring to it are kept."""
        await self.events.get(event_id)
        await self.events.delete(event_id)
        logger.info(f"Event {event_id} deleted")
