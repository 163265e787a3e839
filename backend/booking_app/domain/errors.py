"""Domain error taxonomy.

Every rule violation in the booking core is one of four kinds. Use-case
services catch these and turn them into failed result values; nothing in
this hierarchy is meant to reach the HTTP layer uncaught.
"""

from __future__ import annotations


class DomainError(Exception):
    code = "domain_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(DomainError):
    """Structural/format problems: bad email, empty name, unparseable datetime."""

    code = "invalid_input"


class NotFoundError(DomainError):
    code = "not_found"


class ConflictError(DomainError):
    """State conflicts: double booking, no seats, already cancelled, past slot."""

    code = "conflict"


class ForbiddenError(DomainError):
    code = "forbidden"


class StorageError(DomainError):
    """The gateway reported failure on a mutation that passed every gate."""

    code = "storage_error"


# Messages shared by the gates and the tests.
MISSING_BOOKING_FIELDS = "missing/invalid email or slot id"
SLOT_NOT_FOUND = "slot not found"
NO_SEATS = "no seats available"
ALREADY_BOOKED = "already booked"
SLOT_PASSED = "slot has passed"

RESERVATION_NOT_FOUND = "not found"
NOT_AUTHORIZED = "not authorized"
ALREADY_CANCELLED = "already cancelled"
CANNOT_CANCEL_PAST = "cannot cancel past slot"

SERVICE_NOT_FOUND = "service not found"
NOT_FOUND = "not found"
EMPTY_SERVICE_NAME = "service name cannot be empty"
INVALID_DURATION = "duration must be a positive number"
INVALID_CAPACITY = "capacity must be a positive integer"
INVALID_DATETIME = "invalid datetime format (use ISO-8601, e.g. 2025-11-20T14:00:00Z)"
SLOT_NOT_FUTURE = "slot must be in the future"
ADMIN_REQUIRED = "admin role required"
