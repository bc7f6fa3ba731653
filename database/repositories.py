"""Repositories for events, users and notifications."""

from __future__ import annotations

from typing import Iterable, List

from core.exceptions import NotFoundError
from database.base_repository import BaseRepository
from database.document_store import Document, DocumentRef, DocumentStore, Transaction
from database.models import (
    Event,
    Notification,
    Organizer,
    User,
    WaitlistEntry,
    user_from_document,
    user_to_document,
)

WAITLIST_FIELD = "waitListEntrants"
ORGANIZER_FIELD = "eventOrganizerHardwareID"
RECEIVER_FIELD = "receivingUserHardwareID"


class EventRepository(BaseRepository[Event]):
    """Repository for event documents."""

    def decode(self, document: Document) -> Event:
        return Event.from_document(document)

    def encode(self, record: Event) -> Document:
        return record.to_document()

    def key(self, record: Event) -> object:
        return record.event_id

    async def list_by_organizer(self, organizer_id: str) -> List[Event]:
        return await self.find_by(ORGANIZER_FIELD, organizer_id)

    async def list_refs_by_organizer(self, organizer_id: str) -> List[DocumentRef]:
        """References to every owned event document, including ones that fail to decode."""
        rows = await self.store.query(self.collection, ORGANIZER_FIELD, organizer_id)
        return [self.ref(doc_id) for doc_id, _ in rows]

    async def add_waitlist_entry(self, event_id: int, entry: WaitlistEntry) -> None:
        """Atomic array-union of one entry onto the waitlist field."""
        await self.store.array_union(self.collection, event_id, WAITLIST_FIELD, [entry.to_document()])

    async def remove_waitlist_entries(self, event_id: int, entries: Iterable[WaitlistEntry]) -> None:
        """Atomic array-remove of the given entries from the waitlist field."""
        await self.store.array_remove(
            self.collection, event_id, WAITLIST_FIELD, [entry.to_document() for entry in entries]
        )


class UserRepository(BaseRepository[User]):
    """Repository for user profiles, keyed by hardware ID."""

    def decode(self, document: Document) -> User:
        return user_from_document(document)

    def encode(self, record: User) -> Document:
        return user_to_document(record)

    def key(self, record: User) -> object:
        return record.hardware_id

    async def list_organizers(self) -> List[Organizer]:
        return [user for user in await self.list_all() if isinstance(user, Organizer)]


class NotificationRepository(BaseRepository[Notification]):
    """Repository for notification records."""

    def decode(self, document: Document) -> Notification:
        return Notification.from_document(document)

    def encode(self, record: Notification) -> Document:
        return record.to_document()

    def key(self, record: Notification) -> object:
        return record.notification_id

    async def list_for_receiver(self, receiver_id: str, include_dismissed: bool = True) -> List[Notification]:
        """Notifications addressed to a user, newest first."""
        notifications = await self.find_by(RECEIVER_FIELD, receiver_id)
        if not include_dismissed:
            notifications = [n for n in notifications if not n.dismissed]
        return sorted(notifications, key=lambda n: n.notification_id, reverse=True)

    async def set_dismissed(self, notification_id: int, dismissed: bool = True) -> None:
        """Flip only the dismissed flag, leaving concurrent owner edits intact."""

        async def body(txn: Transaction) -> None:
            if await txn.get(self.collection, notification_id) is None:
                raise NotFoundError(self.collection, notification_id)
            txn.update(self.collection, notification_id, {"dismissed": dismissed})

        await self.store.run_transaction(body)
