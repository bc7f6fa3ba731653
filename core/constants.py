"""Application-wide constants and configuration values."""

from __future__ import annotations

from enum import Enum


# Store layout
class Collections:
    """Default collection and document names in the document store."""
    USERS = "users"
    EVENTS = "events"
    NOTIFICATIONS = "notifications"
    EXTRAS = "extras"
    COUNTER_DOCUMENT = "uniqueIdentifierData"


# Store constants
class StoreDefaults:
    """Default document store configuration."""
    POOL_SIZE = 10
    BUSY_TIMEOUT = 5000  # milliseconds
    TRANSACTION_ATTEMPTS = 5
    RETRY_DELAY = 0.05  # seconds, doubled per attempt


# Lottery constants
class LotteryDefaults:
    """Lottery configuration."""
    SEED_RANDOM_BYTES = 32
    MIN_SAMPLE_SIZE = 1
    REPLACEMENT_SAMPLE_SIZE = 1


# Notification settings
class NotificationDefaults:
    """Notification texts and defaults."""
    ENABLED = True
    SELECTED_HEADER = "You've been selected"
    SELECTED_BODY = "You were selected in the lottery for {event_name}. Accept or decline your invitation."
    NOT_SELECTED_HEADER = "Not selected this round"
    NOT_SELECTED_BODY = "You were not selected for {event_name} this round. You remain on the waitlist."
    CANCELLED_HEADER = "Registration cancelled"
    CANCELLED_BODY = "The organizer cancelled your registration for {event_name}."


# Event link payloads
class EventLinkDefaults:
    """Payload format encoded into event QR codes."""
    PREFIX = "EVENT:"


class CounterField(str, Enum):
    """Fields of the counter document backing unique IDs."""
    EVENT = "curEvent"
    NOTIFICATION = "curNotification"


class UserType(str, Enum):
    """Discriminator stored on every user document."""
    ENTRANT = "ENTRANT"
    ORGANIZER = "ORGANIZER"
    ADMINISTRATOR = "ADMINISTRATOR"


class EntrantStatus(str, Enum):
    """Status of one entrant relative to one event."""
    NONE = "NONE"
    WAITLISTED = "WAITLISTED"
    INVITED = "INVITED"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class WaitlistOperationResult(str, Enum):
    """Outcome codes reported for waitlist operations."""
    SUCCESS = "SUCCESS"
    ALREADY_INVITED = "ALREADY_INVITED"
    ALREADY_ACCEPTED = "ALREADY_ACCEPTED"
    ALREADY_DECLINED = "ALREADY_DECLINED"
    ALREADY_ON_WAITLIST = "ALREADY_ON_WAITLIST"
    NOT_ON_WAITLIST = "NOT_ON_WAITLIST"
    NOT_INVITED = "NOT_INVITED"
    REGISTRATION_NOT_STARTED = "REGISTRATION_NOT_STARTED"
    REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
    WAITLIST_FULL = "WAITLIST_FULL"


class WindowStatus(str, Enum):
    """Registration window classification."""
    OPEN = "open"
    NOT_YET_OPEN = "not_yet_open"
    CLOSED = "closed"


class CapacityStatus(str, Enum):
    """Waitlist capacity classification."""
    HAS_ROOM = "has_room"
    FULL = "full"
