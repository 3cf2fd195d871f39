"""
Error taxonomy for attendance decisions.

PolicyRejection is a terminal, user-facing refusal and is never retried.
InfrastructureFailure means a collaborator (face service, database) failed and
the caller may retry. ValidationFailure is raised before any collaborator call.
"""
from typing import Any, Dict, Optional

from presence.constants import RejectionReason


class AttendanceError(Exception):
    """Base class for all attendance engine errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class PolicyRejection(AttendanceError):
    """A check refused the attendance event"""

    def __init__(self, reason: RejectionReason, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.reason = reason


class InfrastructureFailure(AttendanceError):
    """A collaborator was unreachable or failed; safe to retry"""

    retryable = True


class IdentityServiceUnavailable(InfrastructureFailure):
    pass


class StoreUnavailable(InfrastructureFailure):
    pass


class ValidationFailure(AttendanceError):
    """Malformed input rejected before any collaborator is called"""


class InvalidCoordinate(ValidationFailure):
    pass


class DuplicateOpenRecord(Exception):
    """Raised by the store when the one-open-record-per-day constraint fires"""
