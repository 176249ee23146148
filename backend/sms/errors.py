"""
Service error taxonomy.

These never reach callers of StudentService: each public operation catches
ServiceError, logs it and reports absence (None / False) instead.
"""


class ServiceError(Exception):
    """Raised when an operation is rejected before any mutation is applied"""

    reason = "error"


class NotFoundError(ServiceError):
    reason = "not_found"


class GradeOutOfRangeError(ServiceError):
    reason = "validation_failed"


class DuplicateEmailError(ServiceError):
    reason = "duplicate_email"


class TicketAlreadyClosedError(ServiceError):
    reason = "already_closed"


class InvalidReferenceError(ServiceError):
    """Ticket creation against a student that does not exist"""

    reason = "invalid_reference"
