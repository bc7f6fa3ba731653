"""Seeded, auditable lottery draws over an event waitlist."""

from __future__ import annotations

import hashlib
import os
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from core import get_logger, LotteryDefaults, NotificationDefaults
from core.constants import EntrantStatus
from core.exceptions import EmptyWaitlistError, ValidationError
from database.models import Event, WaitlistEntry
from database.repositories import EventRepository
from services.notification_service import BulkSendResult, NotificationService
from utils.dates import utc_now

logger = get_logger(__name__)


@dataclass
class DrawResult:
    """Partition produced by one draw, plus the seed that reproduces it."""
    event_id: int
    seed: str
    selected: List[WaitlistEntry]
    remaining: List[WaitlistEntry]
    notified: Optional[BulkSendResult] = field(default=None, repr=False)

    @property
    def selected_ids(self) -> List[str]:
        return [entry.entrant_id for entry in self.selected]

    @property
    def remaining_ids(self) -> List[str]:
        return [entry.entrant_id for entry in self.remaining]


def generate_seed(random_bytes: int = LotteryDefaults.SEED_RANDOM_BYTES) -> str:
    """SHA-256 hex digest of the current time and fresh OS randomness."""
    timestamp = utc_now().isoformat()
    combined = f"{timestamp}{os.urandom(random_bytes).hex()}"
    return hashlib.sha256(combined.encode()).hexdigest()


def partition_waitlist(
    entries: Sequence[WaitlistEntry],
    sample_size: int,
    rng: random.Random,
) -> Tuple[List[WaitlistEntry], List[WaitlistEntry]]:
    """Shuffle the whole list uniformly and split off the first ``sample_size``.

    Every entry has the same chance of selection regardless of join order.
    """
    shuffled = list(entries)
    rng.shuffle(shuffled)
    n = min(sample_size, len(shuffled))
    return shuffled[:n], shuffled[n:]


def eligible_entries(event: Event) -> List[WaitlistEntry]:
    """One entry per entrant whose status currently resolves to WAITLISTED."""
    return [
        entry for entry in event.distinct_waitlist()
        if event.entrant_status(entry.entrant_id) is EntrantStatus.WAITLISTED
    ]


class LotteryDrawEngine:
    """Draws invitees from an event waitlist.

    A draw reads the event, invites the selected entrants in memory and
    writes the event back once. If that write fails nothing is applied and
    the caller runs the draw again from scratch. Two draws racing on the same
    event are not coordinated and can double-invite; organizers are expected
    to serialize their own draws.
    """

    def __init__(
        self,
        events: EventRepository,
        notifications: Optional[NotificationService] = None,
        notify_results: bool = NotificationDefaults.ENABLED,
    ) -> None:
        self.events = events
        self.notifications = notifications
        self.notify_results = notify_results

    async def draw(
        self,
        event_id: int,
        sample_size: int,
        seed: Optional[str] = None,
        notify: Optional[bool] = None,
    ) -> DrawResult:
        """Invite up to ``sample_size`` waitlisted entrants at random.

        Args:
            event_id: Event to draw for
            sample_size: Number of entrants to invite
            seed: Optional seed to reproduce an earlier draw
            notify: Override for sending selected / not-selected notifications

        Returns:
            DrawResult with the selected and remaining entries

        Raises:
            ValidationError: If sample_size is below one
            EmptyWaitlistError: If nobody on the waitlist is eligible
        """
        if sample_size < LotteryDefaults.MIN_SAMPLE_SIZE:
            raise ValidationError("Sample size must be greater than 0")

        event = await self.events.get(event_id)
        eligible = eligible_entries(event)
        if not eligible:
            raise EmptyWaitlistError(f"No entrants in waitlist for event {event_id}")

        seed = seed or generate_seed()
        logger.info(
            f"Drawing {sample_size} of {len(eligible)} entrants for event {event_id} (seed {seed[:16]}...)"
        )
        selected, remaining = partition_waitlist(eligible, sample_size, random.Random(seed))

        for entry in selected:
            event.invite(entry.entrant_id)
        await self.events.save(event)

        result = DrawResult(event_id=event_id, seed=seed, selected=selected, remaining=remaining)
        logger.info(
            f"Invited {len(selected)} entrants for event {event_id}, {len(remaining)} remain waitlisted"
        )

        should_notify = self.notify_results if notify is None else notify
        if should_notify and self.notifications is not None:
            result.notified = await self._notify_results(event, result)
        return result

    async def draw_replacement(self, event_id: int, seed: Optional[str] = None) -> DrawResult:
        """Invite one more entrant, e.g. after an invitee declined."""
        return await self.draw(event_id, LotteryDefaults.REPLACEMENT_SAMPLE_SIZE, seed=seed)

    @staticmethod
    def replay(entries: Sequence[WaitlistEntry], sample_size: int, seed: str) -> List[str]:
        """Recompute the selected entrant IDs of a draw from its inputs."""
        selected, _ = partition_waitlist(entries, sample_size, random.Random(seed))
        return [entry.entrant_id for entry in selected]

    async def _notify_results(self, event: Event, result: DrawResult) -> BulkSendResult:
        outcome = await self.notifications.send_bulk(
            event.organizer_id,
            result.selected_ids,
            NotificationDefaults.SELECTED_HEADER,
            NotificationDefaults.SELECTED_BODY.format(event_name=event.name),
            event.event_id,
        )
        not_selected = await self.notifications.send_bulk(
            event.organizer_id,
            result.remaining_ids,
            NotificationDefaults.NOT_SELECTED_HEADER,
            NotificationDefaults.NOT_SELECTED_BODY.format(event_name=event.name),
            event.event_id,
        )
        outcome.sent.extend(not_selected.sent)
        outcome.failed.extend(not_selected.failed)
        return outcome
