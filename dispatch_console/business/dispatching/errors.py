"""
Domain exceptions for dispatching business logic

These exceptions represent business rule violations and domain-specific errors.
They are raised by the business layer before any request is sent to the
logistics API, and each carries the message shown to the console user.
"""

from typing import Iterable, Optional


class DispatchDomainError(Exception):
    """Base exception for all dispatching domain errors"""
    pass


class ValidationError(DispatchDomainError):
    """Raised when input from a form or query string cannot be parsed"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class DispatchNotFound(DispatchDomainError):
    """Raised when the requested dispatch does not exist"""
    pass


class DispatchTransitionError(DispatchDomainError):
    """Raised when a state transition is invalid or not allowed"""

    def __init__(self, message: str, current_status=None, target_status=None, allowed: Iterable = ()):
        super().__init__(message)
        self.current_status = current_status
        self.target_status = target_status
        self.allowed = sorted(str(s) for s in allowed)


class InvalidTransition(DispatchTransitionError):
    """Raised when the target status is not reachable from the current status"""
    pass


class AlreadyTerminal(DispatchTransitionError):
    """Raised when the dispatch is completed or cancelled and can no longer change"""
    pass


class DispatchPolicyViolation(DispatchDomainError):
    """Raised when a business policy/rule is violated"""
    pass


class BookingNotFound(DispatchPolicyViolation):
    """Raised when a dispatch is requested for a booking that does not exist"""

    def __init__(self, message: str, booking_id: Optional[int] = None):
        super().__init__(message)
        self.booking_id = booking_id


class DriverUnavailable(DispatchPolicyViolation):
    """Raised when the driver to assign does not exist or is not available"""
    pass


class DispatchTimestampError(DispatchPolicyViolation):
    """Raised when a dispatch/arrival timestamp cannot be recorded in the current state"""
    pass


class DispatchConsistencyError(DispatchDomainError):
    """Raised when data consistency invariants are violated"""
    pass


class IncompleteJoin(DispatchConsistencyError):
    """Raised when a detail view is assembled without its dispatch, booking or driver"""

    def __init__(self, message: str, missing: Iterable[str] = ()):
        super().__init__(message)
        self.missing = list(missing)


class DispatchConflictError(DispatchDomainError):
    """Raised when resource conflicts occur (e.g., a second dispatch for a booking)"""
    pass


class DuplicateDispatchError(DispatchConflictError):
    """Raised when the backend already holds a dispatch for the booking"""
    pass
