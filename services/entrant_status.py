"""Entrant lifecycle for one event: waitlist, invitation, acceptance, decline.

Two write strategies are used, chosen per operation:

* set membership ops (``join_waitlist``, ``leave_waitlist``) go through the
  store's atomic array-union / array-remove on the waitlist field, so
  concurrent joins never lose each other's entries;
* structural transitions (accept, decline, cancel, reinstate) read the event,
  mutate an in-memory copy and rewrite the whole document. Concurrent
  structural writers on one event are last-writer-wins.

Window and capacity checks read a snapshot before the array-union, so under
concurrent joins a capped waitlist can overshoot by up to the number of
simultaneous joiners minus one.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, TypeVar

from core import get_logger
from core.constants import EntrantStatus, NotificationDefaults
from core.exceptions import ApplicationError, NotOnWaitlistError
from database.models import Event, WaitlistEntry, require_entrant_id
from database.repositories import EventRepository
from services.capacity import require_room
from services.notification_service import NotificationService
from services.registration_window import require_open_window
from utils.dates import ensure_utc, utc_now

logger = get_logger(__name__)

R = TypeVar("R")


class EntrantStatusService:
    """Applies entrant state transitions to stored events."""

    def __init__(
        self,
        events: EventRepository,
        notifications: Optional[NotificationService] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.events = events
        self.notifications = notifications
        self.clock = clock

    def _now(self, now: Optional[datetime]) -> datetime:
        return ensure_utc(now) if now is not None else self.clock()

    async def entrant_status(self, event_id: int, entrant_id: str) -> EntrantStatus:
        event = await self.events.get(event_id)
        return event.entrant_status(entrant_id)

    # Set membership ops

    async def join_waitlist(self, event_id: int, entrant_id: str, now: Optional[datetime] = None) -> WaitlistEntry:
        """Put an entrant with no status on the waitlist.

        Raises:
            AlreadyInvitedError, AlreadyAcceptedError, AlreadyDeclinedError,
            AlreadyOnWaitlistError: entrant already has a status
            WindowNotOpenError / WindowClosedError: outside registration
            CapacityExceededError: waitlist is full
        """
        require_entrant_id(entrant_id)
        now = self._now(now)
        event = await self.events.get(event_id)

        event.ensure_can_join(entrant_id)
        require_open_window(event, now)
        require_room(event)

        entry = WaitlistEntry(entrant_id, now)
        await self.events.add_waitlist_entry(event_id, entry)
        logger.info(
            f"Entrant {entrant_id} joined waitlist of event {event_id}",
            extra={"event_id": event_id, "entrant_id": entrant_id},
        )
        return entry

    async def leave_waitlist(self, event_id: int, entrant_id: str) -> None:
        """Take an entrant off the waitlist, including duplicate entries left by racing joins."""
        require_entrant_id(entrant_id)
        event = await self.events.get(event_id)
        entries = event.waitlist_entries_for(entrant_id)
        if not entries or event.entrant_status(entrant_id) is not EntrantStatus.WAITLISTED:
            raise NotOnWaitlistError(f"Entrant {entrant_id} is not on the waitlist of event {event_id}")

        await self.events.remove_waitlist_entries(event_id, entries)
        logger.info(
            f"Entrant {entrant_id} left waitlist of event {event_id}",
            extra={"event_id": event_id, "entrant_id": entrant_id},
        )

    # Structural transitions

    async def _structural_transition(self, event_id: int, mutate: Callable[[Event], R]) -> tuple[Event, R]:
        event = await self.events.get(event_id)
        outcome = mutate(event)
        await self.events.save(event)
        return event, outcome

    async def accept(self, event_id: int, entrant_id: str) -> None:
        require_entrant_id(entrant_id)
        await self._structural_transition(event_id, lambda event: event.accept(entrant_id))
        logger.info(f"Entrant {entrant_id} accepted invitation to event {event_id}")

    async def decline(self, event_id: int, entrant_id: str) -> None:
        require_entrant_id(entrant_id)
        await self._structural_transition(event_id, lambda event: event.decline(entrant_id))
        logger.info(f"Entrant {entrant_id} declined invitation to event {event_id}")

    async def cancel_entrant(self, event_id: int, entrant_id: str, notify: bool = True) -> EntrantStatus:
        """Organizer removal of an invited or accepted entrant.

        The entrant moves to DECLINED, which frees a slot for a replacement
        draw. Returns the status the entrant was cancelled from.
        """
        require_entrant_id(entrant_id)
        event, previous = await self._structural_transition(event_id, lambda event: event.cancel(entrant_id))
        logger.info(
            f"Entrant {entrant_id} cancelled from event {event_id} (was {previous.value})",
            extra={"event_id": event_id, "entrant_id": entrant_id},
        )
        if notify:
            await self._notify_cancelled(event, entrant_id)
        return previous

    async def reinstate(self, event_id: int, entrant_id: str, now: Optional[datetime] = None) -> WaitlistEntry:
        """Re-admit a declined entrant to the waitlist, subject to capacity."""
        require_entrant_id(entrant_id)
        now = self._now(now)

        def mutate(event: Event) -> WaitlistEntry:
            if event.entrant_status(entrant_id) is EntrantStatus.DECLINED:
                require_room(event)
            return event.reinstate(entrant_id, now)

        _, entry = await self._structural_transition(event_id, mutate)
        logger.info(f"Entrant {entrant_id} reinstated on waitlist of event {event_id}")
        return entry

    async def _notify_cancelled(self, event: Event, entrant_id: str) -> None:
        if self.notifications is None:
            return
        try:
            await self.notifications.send(
                event.organizer_id,
                entrant_id,
                NotificationDefaults.CANCELLED_HEADER,
                NotificationDefaults.CANCELLED_BODY.format(event_name=event.name),
                event.event_id,
            )
        except ApplicationError as e:
            logger.error(f"Failed to notify {entrant_id} of cancellation: {e}", exc_info=True)
