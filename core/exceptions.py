"""Application-wide exception classes."""

from __future__ import annotations

from typing import Optional

from core.constants import WaitlistOperationResult


class ApplicationError(Exception):
    """Base exception for all application errors."""
    pass


class ConfigurationError(ApplicationError):
    """Raised when configuration is invalid."""
    pass


class ValidationError(ApplicationError):
    """Raised when input validation fails."""
    pass


class DatabaseError(ApplicationError):
    """Base exception for database-related errors."""
    pass


class PersistenceError(DatabaseError):
    """Raised when an underlying store call fails."""
    pass


class TransactionAbortedError(PersistenceError):
    """Raised when a transaction could not commit within its retry budget."""
    pass


class NotFoundError(ApplicationError):
    """Raised when a requested document does not exist."""

    def __init__(self, collection: str, document_id: object) -> None:
        self.collection = collection
        self.document_id = document_id
        super().__init__(f"{collection}/{document_id} not found")


class ServiceError(ApplicationError):
    """Base exception for service-level errors."""
    pass


class IdentifierError(ServiceError):
    """Base exception for unique identifier allocation."""
    pass


class CounterMissingError(IdentifierError):
    """Raised when the counter document or field was never initialized."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Counter field '{field}' is not initialized")


class AllocationFailedError(IdentifierError):
    """Raised when the counter transaction exhausted its retries."""
    pass


class RegistrationError(ServiceError):
    """Base exception for rejected entrant transitions."""

    result: WaitlistOperationResult = WaitlistOperationResult.SUCCESS

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.result.value)


class StateConflictError(RegistrationError):
    """Raised when the entrant's current status forbids the transition."""
    pass


class AlreadyInvitedError(StateConflictError):
    result = WaitlistOperationResult.ALREADY_INVITED


class AlreadyAcceptedError(StateConflictError):
    result = WaitlistOperationResult.ALREADY_ACCEPTED


class AlreadyDeclinedError(StateConflictError):
    result = WaitlistOperationResult.ALREADY_DECLINED


class AlreadyOnWaitlistError(StateConflictError):
    result = WaitlistOperationResult.ALREADY_ON_WAITLIST


class NotOnWaitlistError(StateConflictError):
    result = WaitlistOperationResult.NOT_ON_WAITLIST


class NotInvitedError(StateConflictError):
    result = WaitlistOperationResult.NOT_INVITED


class WindowNotOpenError(RegistrationError):
    """Raised when registration has not started yet."""
    result = WaitlistOperationResult.REGISTRATION_NOT_STARTED


class WindowClosedError(RegistrationError):
    """Raised when registration has already ended."""
    result = WaitlistOperationResult.REGISTRATION_CLOSED


class CapacityExceededError(RegistrationError):
    """Raised when the waitlist is full."""
    result = WaitlistOperationResult.WAITLIST_FULL


class LotteryError(ServiceError):
    """Base exception for lottery operations."""
    pass


class EmptyWaitlistError(LotteryError):
    """Raised when there is nobody eligible to draw."""
    pass
