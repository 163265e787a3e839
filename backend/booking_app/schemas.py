from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Self

from pydantic import AliasChoices, BaseModel, Field, field_serializer

from .domain.errors import DomainError
from .models import Reservation, ReservationStatus, Service, Slot, User, UserRole
from .utils.time import utc_naive_to_aware


class _Timestamped(BaseModel):
    @field_serializer("created_at", "starts_at", when_used="json", check_fields=False)
    def _ser_datetime(self, dt: datetime) -> str:
        return dt.astimezone(timezone.utc).isoformat()


# ---- read models


class UserRead(BaseModel):
    email: str
    role: UserRole

    @classmethod
    def from_db(cls, *, user: User) -> "UserRead":
        return cls(email=user.email, role=user.role)


class ServiceRead(_Timestamped):
    id: str
    name: str
    description: str
    duration_minutes: int
    created_at: datetime

    @classmethod
    def from_db(cls, *, service: Service) -> "ServiceRead":
        return cls(
            id=service.id,
            name=service.name,
            description=service.description,
            duration_minutes=service.duration_minutes,
            created_at=utc_naive_to_aware(service.created_at),
        )


class SlotRead(_Timestamped):
    id: str
    service_id: str
    starts_at: datetime
    capacity: int
    available: int
    created_at: datetime

    @classmethod
    def from_db(cls, *, slot: Slot) -> "SlotRead":
        return cls(
            id=slot.id,
            service_id=slot.service_id,
            starts_at=utc_naive_to_aware(slot.starts_at),
            capacity=slot.capacity,
            available=slot.available,
            created_at=utc_naive_to_aware(slot.created_at),
        )


class ReservationRead(_Timestamped):
    id: str
    slot_id: str
    user_email: str
    status: ReservationStatus
    created_at: datetime

    @classmethod
    def from_db(cls, *, reservation: Reservation) -> "ReservationRead":
        return cls(
            id=reservation.id,
            slot_id=reservation.slot_id,
            user_email=reservation.user_email,
            status=reservation.status,
            created_at=utc_naive_to_aware(reservation.created_at),
        )


# ---- joined views


class BookingView(ReservationRead):
    """A reservation joined with its slot and service; either may be gone."""

    slot: Optional[SlotRead] = None
    service: Optional[ServiceRead] = None

    @classmethod
    def build(
        cls,
        *,
        reservation: Reservation,
        slot: Slot | None,
        service: Service | None,
    ) -> "BookingView":
        base = ReservationRead.from_db(reservation=reservation)
        return cls(
            **base.model_dump(),
            slot=SlotRead.from_db(slot=slot) if slot is not None else None,
            service=ServiceRead.from_db(service=service) if service is not None else None,
        )


class SlotWithService(SlotRead):
    service: Optional[ServiceRead] = None

    @classmethod
    def build(cls, *, slot: Slot, service: Service | None) -> "SlotWithService":
        return cls(
            **SlotRead.from_db(slot=slot).model_dump(),
            service=ServiceRead.from_db(service=service) if service is not None else None,
        )


class SlotDetails(SlotWithService):
    reservation_count: int
    is_available: bool
    is_future: bool


class ServiceWithSlots(ServiceRead):
    slots: list[SlotRead] = Field(default_factory=list)


# ---- payloads


class BookingCreate(BaseModel):
    slot_id: str


class ServiceCreate(BaseModel):
    name: Optional[str] = None
    description: str = ""
    duration: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("duration", "duration_minutes"),
    )


class SlotCreate(BaseModel):
    starts_at: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("starts_at", "datetime"),
    )
    capacity: Optional[int] = None


class LoginRequest(BaseModel):
    email: str


# ---- operation results


class OperationResult(BaseModel):
    success: bool
    error: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def failure(cls, exc: DomainError) -> Self:
        return cls(success=False, error=exc.message, code=exc.code)


class BookingResult(OperationResult):
    booking: Optional[ReservationRead] = None


class ServiceResult(OperationResult):
    service: Optional[ServiceRead] = None


class SlotResult(OperationResult):
    slot: Optional[SlotRead] = None


class LoginResult(OperationResult):
    user: Optional[UserRead] = None


class TokenRead(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class CurrentUserRead(BaseModel):
    email: Optional[str] = None
    role: str
