import logging

from ..domain.errors import (
    MISSING_BOOKING_FIELDS,
    RESERVATION_NOT_FOUND,
    SLOT_NOT_FOUND,
    DomainError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from ..domain.repositories import BookingStore
from ..domain.services import ReservationSnapshot, SlotSnapshot, validate_booking, validate_cancellation
from ..domain.validators import validate_reservation
from ..models import Reservation
from ..schemas import BookingResult, BookingView, ReservationRead, SlotDetails, SlotWithService
from ..utils.time import is_future, utc_now_naive

logger = logging.getLogger(__name__)


async def get_my_bookings(store: BookingStore, *, user_email: str) -> list[BookingView]:
    reservations = await store.list_reservations_by_email(user_email)
    views: list[BookingView] = []
    for reservation in reservations:
        slot = await store.get_slot(reservation.slot_id)
        service = await store.get_service(slot.service_id) if slot is not None else None
        views.append(BookingView.build(reservation=reservation, slot=slot, service=service))
    return views


async def get_booking_by_id(store: BookingStore, *, reservation_id: str) -> ReservationRead | None:
    reservation = await store.get_reservation(reservation_id)
    if reservation is None:
        return None
    return ReservationRead.from_db(reservation=reservation)


async def create_booking(
    store: BookingStore,
    *,
    slot_id: str | None,
    user_email: str | None,
) -> BookingResult:
    try:
        reservation = await _create_booking(store, slot_id=slot_id, user_email=user_email)
    except DomainError as exc:
        logger.info("booking rejected slot=%s user=%s: %s", slot_id, user_email, exc.message)
        return BookingResult.failure(exc)
    return BookingResult(success=True, booking=ReservationRead.from_db(reservation=reservation))


async def _create_booking(store: BookingStore, *, slot_id: str | None, user_email: str | None) -> Reservation:
    check = validate_reservation({"slot_id": slot_id, "user_email": user_email})
    if not check.valid or slot_id is None or user_email is None:
        raise InvalidInputError(MISSING_BOOKING_FIELDS)

    slot = await store.get_slot(slot_id)
    if slot is None:
        raise NotFoundError(SLOT_NOT_FOUND)

    snapshot = SlotSnapshot(
        available=slot.available,
        capacity=slot.capacity,
        starts_at=slot.starts_at,
        user_has_confirmed_reservation=await store.has_double_booking(slot_id, user_email),
    )
    validate_booking(snapshot)

    reservation = await store.create_reservation(slot_id, user_email)
    if reservation is None:
        raise StorageError("failed to create reservation")
    return reservation


async def cancel_booking(store: BookingStore, *, reservation_id: str, user_email: str) -> BookingResult:
    try:
        reservation = await _cancel_booking(store, reservation_id=reservation_id, user_email=user_email)
    except DomainError as exc:
        logger.info("cancellation rejected reservation=%s user=%s: %s", reservation_id, user_email, exc.message)
        return BookingResult.failure(exc)
    return BookingResult(success=True, booking=ReservationRead.from_db(reservation=reservation))


async def _cancel_booking(store: BookingStore, *, reservation_id: str, user_email: str) -> Reservation:
    reservation = await store.get_reservation(reservation_id)
    if reservation is None:
        raise NotFoundError(RESERVATION_NOT_FOUND)

    slot = await store.get_slot(reservation.slot_id)
    snapshot = ReservationSnapshot(
        owner_email=reservation.user_email,
        status=reservation.status,
        slot_starts_at=slot.starts_at if slot is not None else None,
    )
    validate_cancellation(snapshot, user_email=user_email)

    if not await store.cancel_reservation(reservation_id):
        raise StorageError("failed to cancel reservation")
    updated = await store.get_reservation(reservation_id)
    if updated is None:
        raise StorageError("failed to cancel reservation")
    return updated


async def get_slot_details(store: BookingStore, *, slot_id: str) -> SlotDetails | None:
    slot = await store.get_slot(slot_id)
    if slot is None:
        return None
    service = await store.get_service(slot.service_id)
    confirmed = await store.list_confirmed_by_slot(slot_id)
    return SlotDetails(
        **SlotWithService.build(slot=slot, service=service).model_dump(),
        reservation_count=len(confirmed),
        is_available=slot.available > 0,
        is_future=is_future(slot.starts_at),
    )


async def get_all_available_slots_with_details(store: BookingStore) -> list[SlotWithService]:
    """Bookable slots right now (free seat, not started), soonest first."""
    now = utc_now_naive()
    slots = [s for s in await store.list_slots() if s.available > 0 and is_future(s.starts_at, now=now)]
    slots.sort(key=lambda s: s.starts_at)
    items: list[SlotWithService] = []
    for slot in slots:
        service = await store.get_service(slot.service_id)
        items.append(SlotWithService.build(slot=slot, service=service))
    return items
