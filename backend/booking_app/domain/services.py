from dataclasses import dataclass
from datetime import datetime

from ..models import ReservationStatus, UserRole
from ..utils.time import is_future
from .errors import (
    ADMIN_REQUIRED,
    ALREADY_BOOKED,
    ALREADY_CANCELLED,
    CANNOT_CANCEL_PAST,
    NO_SEATS,
    NOT_AUTHORIZED,
    SLOT_PASSED,
    ConflictError,
    ForbiddenError,
)


@dataclass(frozen=True)
class SlotSnapshot:
    available: int
    capacity: int
    starts_at: datetime
    user_has_confirmed_reservation: bool


@dataclass(frozen=True)
class ReservationSnapshot:
    owner_email: str
    status: ReservationStatus
    # None once the slot has been deleted
    slot_starts_at: datetime | None


def validate_booking(snapshot: SlotSnapshot, *, now: datetime | None = None) -> int:
    """
    Pure validation: the slot has a free seat, the user holds no confirmed
    reservation on it, and it has not started yet.
    Returns the seats left after booking if OK. Raises domain errors otherwise.
    """
    if snapshot.available <= 0:
        raise ConflictError(NO_SEATS)
    if snapshot.user_has_confirmed_reservation:
        raise ConflictError(ALREADY_BOOKED)
    if not is_future(snapshot.starts_at, now=now):
        raise ConflictError(SLOT_PASSED)
    return seats_after_booking(snapshot.available)


def validate_cancellation(
    snapshot: ReservationSnapshot,
    *,
    user_email: str,
    now: datetime | None = None,
) -> None:
    if snapshot.owner_email != user_email:
        raise ForbiddenError(NOT_AUTHORIZED)
    if snapshot.status == ReservationStatus.CANCELLED:
        raise ConflictError(ALREADY_CANCELLED)
    if snapshot.slot_starts_at is not None and not is_future(snapshot.slot_starts_at, now=now):
        raise ConflictError(CANNOT_CANCEL_PAST)


def require_admin(role: str | None) -> None:
    if role != UserRole.ADMIN:
        raise ForbiddenError(ADMIN_REQUIRED)


def seats_after_booking(available: int) -> int:
    return max(0, available - 1)


def seats_after_cancellation(available: int, capacity: int) -> int:
    return min(capacity, available + 1)
