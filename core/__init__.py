"""Core application components."""

# Import in correct order to avoid circular dependencies
from core.logger import setup_logger, get_logger
from core.constants import (
    Collections,
    StoreDefaults,
    LotteryDefaults,
    NotificationDefaults,
    EventLinkDefaults,
    CounterField,
    UserType,
    EntrantStatus,
    WaitlistOperationResult,
    WindowStatus,
    CapacityStatus,
)
from core.exceptions import (
    ApplicationError,
    ConfigurationError,
    ValidationError,
    DatabaseError,
    PersistenceError,
    TransactionAbortedError,
    NotFoundError,
    ServiceError,
    CounterMissingError,
    AllocationFailedError,
    RegistrationError,
    StateConflictError,
    WindowNotOpenError,
    WindowClosedError,
    CapacityExceededError,
    LotteryError,
    EmptyWaitlistError,
)

__all__ = [
    # Logging
    'setup_logger',
    'get_logger',
    # Constants
    'Collections',
    'StoreDefaults',
    'LotteryDefaults',
    'NotificationDefaults',
    'EventLinkDefaults',
    'CounterField',
    'UserType',
    'EntrantStatus',
    'WaitlistOperationResult',
    'WindowStatus',
    'CapacityStatus',
    # Exceptions
    'ApplicationError',
    'ConfigurationError',
    'ValidationError',
    'DatabaseError',
    'PersistenceError',
    'TransactionAbortedError',
    'NotFoundError',
    'ServiceError',
    'CounterMissingError',
    'AllocationFailedError',
    'RegistrationError',
    'StateConflictError',
    'WindowNotOpenError',
    'WindowClosedError',
    'CapacityExceededError',
    'LotteryError',
    'EmptyWaitlistError',
]
