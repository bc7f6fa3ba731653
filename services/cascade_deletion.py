"""Deletion of users together with the records they own."""

from __future__ import annotations

from typing import List

from core import get_logger
from core.exceptions import NotFoundError
from database.document_store import DocumentStore
from database.models import Administrator, Entrant, Organizer
from database.repositories import EventRepository, UserRepository

logger = get_logger(__name__)


class CascadeDeletionCoordinator:
    """Deletes user profiles and, for organizers, every event they own.

    Events go first in one all-or-nothing batch, the profile only after that
    batch committed. A failed batch leaves both the events and the profile in
    place. Notifications that mention the user or the events are kept.
    """

    def __init__(self, store: DocumentStore, events: EventRepository, users: UserRepository) -> None:
        self.store = store
        self.events = events
        self.users = users

    async def delete_organizer_cascade(self, organizer_id: str) -> List[str]:
        """Delete an organizer's events, then the organizer's profile.

        Owned events are collected straight from the query result, so
        documents that no longer decode are deleted too.

        Returns:
            Document IDs of the deleted events
        """
        refs = await self.events.list_refs_by_organizer(organizer_id)
        event_ids = [ref.doc_id for ref in refs]

        if refs:
            await self.store.batch_delete(refs)
            logger.info(
                f"Deleted {len(event_ids)} events of organizer {organizer_id}",
                extra={"organizer_id": organizer_id, "event_ids": event_ids},
            )
        else:
            logger.info(f"Organizer {organizer_id} owns no events")

        await self.users.delete(organizer_id)
        logger.info(f"Deleted organizer profile {organizer_id}")
        return event_ids

    async def delete_user(self, user_id: str) -> List[str]:
        """Delete any user, cascading to owned events for organizers.

        Raises:
            NotFoundError: If no user with that hardware ID exists
        """
        user = await self.users.find(user_id)
        match user:
            case None:
                raise NotFoundError(self.users.collection, user_id)
            case Organizer():
                return await self.delete_organizer_cascade(user_id)
            case Entrant() | Administrator():
                await self.users.delete(user_id)
                logger.info(f"Deleted {user.user_type.value.lower()} profile {user_id}")
                return []
