"""Service for creating and managing notification records.

Only the records are produced here; presenting them (push, in-app lists) is
up to the clients that read the notifications collection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from core import get_logger
from core.constants import EntrantStatus
from core.exceptions import ApplicationError, ValidationError
from database.models import Notification
from database.repositories import EventRepository, NotificationRepository
from services.sequence import SequenceService

logger = get_logger(__name__)


@dataclass
class BulkSendResult:
    """Outcome of sending one message to many receivers."""
    sent: List[Notification] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.sent)

    @property
    def failure_count(self) -> int:
        return len(self.failed)


class NotificationService:
    """Service for managing user notifications."""

    def __init__(
        self,
        notifications: NotificationRepository,
        sequence: SequenceService,
        events: Optional[EventRepository] = None,
    ) -> None:
        self.notifications = notifications
        self.sequence = sequence
        self.events = events

    async def send(
        self,
        sender_id: str,
        receiver_id: str,
        header: str,
        body: str,
        event_id: Optional[int] = None,
    ) -> Notification:
        """Allocate an ID and persist one notification.

        Args:
            sender_id: Hardware ID of the sending user
            receiver_id: Hardware ID of the receiving user
            header: Notification title
            body: Notification message
            event_id: Optional event the notification refers to

        Returns:
            The stored notification
        """
        if not receiver_id:
            raise ValidationError("Notification receiver cannot be empty")

        notification_id = await self.sequence.next_notification_id()
        notification = Notification(
            notification_id=notification_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            header=header,
            body=body,
            event_id=event_id,
        )
        await self.notifications.save(notification)
        logger.info(
            f"Notification {notification_id} sent to {receiver_id}",
            extra={"notification_id": notification_id, "receiver_id": receiver_id},
        )
        return notification

    async def send_bulk(
        self,
        sender_id: str,
        receiver_ids: Iterable[str],
        header: str,
        body: str,
        event_id: Optional[int] = None,
    ) -> BulkSendResult:
        """Send the same message to each receiver; failures are counted, not raised."""
        result = BulkSendResult()
        for receiver_id in receiver_ids:
            try:
                result.sent.append(await self.send(sender_id, receiver_id, header, body, event_id))
            except ApplicationError as e:
                logger.error(
                    f"Failed to send notification to {receiver_id}: {e}",
                    exc_info=True,
                    extra={"receiver_id": receiver_id},
                )
                result.failed.append(receiver_id)

        logger.info(
            f"Bulk notification finished: {result.success_count} sent, {result.failure_count} failed"
        )
        return result

    async def notify_group(
        self,
        sender_id: str,
        event_id: int,
        status: EntrantStatus,
        header: str,
        body: str,
    ) -> BulkSendResult:
        """Message every entrant of an event currently in ``status``."""
        if self.events is None:
            raise ValidationError("Group notifications need an event repository")
        if status is EntrantStatus.NONE:
            raise ValidationError("Cannot notify entrants without a status")

        event = await self.events.get(event_id)
        receivers = event.ids_with_status(status)
        if not receivers:
            logger.info(f"No {status.value} entrants to notify for event {event_id}")
        return await self.send_bulk(sender_id, receivers, header, body, event_id)

    async def dismiss(self, notification_id: int) -> None:
        await self.notifications.set_dismissed(notification_id, True)

    async def get(self, notification_id: int) -> Notification:
        return await self.notifications.get(notification_id)

    async def list_for_receiver(self, receiver_id: str, include_dismissed: bool = True) -> List[Notification]:
        return await self.notifications.list_for_receiver(receiver_id, include_dismissed)

    async def list_all(self) -> List[Notification]:
        return await self.notifications.list_all()

    async def delete(self, notification_id: int) -> None:
        await self.notifications.delete(notification_id)
