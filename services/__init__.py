"""Services package."""

from .sequence import SequenceService, TransactionalCounterSequence
from .registration_window import check_window, is_registration_open, describe_window, require_open_window
from .capacity import check_capacity, remaining_slots, require_room
from .notification_service import NotificationService, BulkSendResult
from .entrant_status import EntrantStatusService
from .lottery import LotteryDrawEngine, DrawResult, generate_seed, partition_waitlist
from .cascade_deletion import CascadeDeletionCoordinator
from .event_service import EventService

__all__ = [
    "SequenceService",
    "TransactionalCounterSequence",
    "check_window",
    "is_registration_open",
    "describe_window",
    "require_open_window",
    "check_capacity",
    "remaining_slots",
    "require_room",
    "NotificationService",
    "BulkSendResult",
    "EntrantStatusService",
    "LotteryDrawEngine",
    "DrawResult",
    "generate_seed",
    "partition_waitlist",
    "CascadeDeletionCoordinator",
    "EventService",
]
