from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ..deps import get_current_user_email, get_store
from ..domain.repositories import BookingStore
from ..models import ReservationStatus
from ..schemas import BookingCreate, BookingView, ReservationRead
from ..usecases import bookings as booking_usecase
from ..utils.audit_log import emit_audit_log
from .errors import raise_for_result, require_payload

router = APIRouter(prefix="", tags=["reservations"])


@router.post("/reservations", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    payload: BookingCreate,
    store: BookingStore = Depends(get_store),
    user_email: str = Depends(get_current_user_email),
) -> ReservationRead:
    result = await booking_usecase.create_booking(store, slot_id=payload.slot_id, user_email=user_email)
    raise_for_result(result)
    booking = require_payload(result.booking)

    try:
        emit_audit_log(
            action="reservation.created",
            initiator="user",
            user_email=user_email,
            reservation_id=booking.id,
            slot_id=booking.slot_id,
            status_from=None,
            status_to=booking.status,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return booking


@router.get("/me/reservations", response_model=List[BookingView])
async def list_my_reservations(
    store: BookingStore = Depends(get_store),
    user_email: str = Depends(get_current_user_email),
) -> list[BookingView]:
    return await booking_usecase.get_my_bookings(store, user_email=user_email)


@router.get("/me/reservations/{reservation_id}", response_model=ReservationRead)
async def get_my_reservation(
    reservation_id: str = Path(..., min_length=1),
    store: BookingStore = Depends(get_store),
    user_email: str = Depends(get_current_user_email),
) -> ReservationRead:
    reservation = await booking_usecase.get_booking_by_id(store, reservation_id=reservation_id)
    # someone else's reservation looks the same as a missing one
    if reservation is None or reservation.user_email != user_email:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation not found")
    return reservation


@router.post("/me/reservations/{reservation_id}/cancel", response_model=ReservationRead)
async def cancel_reservation(
    reservation_id: str = Path(..., min_length=1),
    store: BookingStore = Depends(get_store),
    user_email: str = Depends(get_current_user_email),
) -> ReservationRead:
    result = await booking_usecase.cancel_booking(store, reservation_id=reservation_id, user_email=user_email)
    raise_for_result(result)
    booking = require_payload(result.booking)

    try:
        emit_audit_log(
            action="reservation.cancelled",
            initiator="user",
            user_email=user_email,
            reservation_id=booking.id,
            slot_id=booking.slot_id,
            status_from=ReservationStatus.CONFIRMED,
            status_to=booking.status,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return booking
