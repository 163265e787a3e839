from __future__ import annotations

import functools
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..domain.repositories import BookingStore
from ..domain.services import seats_after_booking, seats_after_cancellation
from ..models import Reservation, ReservationStatus, Service, Slot, User, UserRole
from ..utils.ids import generate_id
from ..utils.time import utc_now_naive

logger = logging.getLogger(__name__)


def _storage_guard(fallback: Any) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Any]]]:
    """Turn storage failures into `fallback` plus a logged diagnostic.

    OverflowError is what the drivers raise for integers the column cannot hold.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except (SQLAlchemyError, OSError, OverflowError):
                logger.exception("storage failure in %s", func.__name__)
                return fallback() if callable(fallback) else fallback

        return wrapper

    return decorator


class SqlAlchemyBookingStore(BookingStore):
    """Gateway over the SQL tables; one session and one transaction per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    # ---- users

    @_storage_guard(list)
    async def list_users(self) -> list[User]:
        async with self.session_factory() as session:
            return list(await session.scalars(select(User).order_by(User.created_at)))

    @_storage_guard(None)
    async def get_user_by_email(self, email: str) -> User | None:
        async with self.session_factory() as session:
            return await session.get(User, email)

    @_storage_guard(None)
    async def create_user(self, *, email: str, role: UserRole = UserRole.USER) -> User | None:
        user = User(email=email, role=role, created_at=utc_now_naive())
        async with self.session_factory.begin() as session:
            session.add(user)
        return user

    # ---- services

    @_storage_guard(list)
    async def list_services(self) -> list[Service]:
        async with self.session_factory() as session:
            return list(await session.scalars(select(Service).order_by(Service.created_at)))

    @_storage_guard(None)
    async def get_service(self, service_id: str) -> Service | None:
        async with self.session_factory() as session:
            return await session.get(Service, service_id)

    @_storage_guard(None)
    async def create_service(
        self,
        *,
        name: str,
        description: str,
        duration_minutes: int,
    ) -> Service | None:
        service = Service(
            id=generate_id("svc"),
            name=name,
            description=description,
            duration_minutes=duration_minutes,
            created_at=utc_now_naive(),
        )
        async with self.session_factory.begin() as session:
            session.add(service)
        return service

    @_storage_guard(False)
    async def delete_service(self, service_id: str) -> bool:
        """Delete the service together with all of its slots."""
        async with self.session_factory.begin() as session:
            if await session.get(Service, service_id) is None:
                return False
            slot_ids = list(await session.scalars(select(Slot.id).where(Slot.service_id == service_id)))
            await self._cancel_confirmed_on(session, slot_ids)
            await session.execute(delete(Slot).where(Slot.service_id == service_id))
            await session.execute(delete(Service).where(Service.id == service_id))
        logger.debug("deleted service %s with %d slots", service_id, len(slot_ids))
        return True

    # ---- slots

    @_storage_guard(list)
    async def list_slots(self) -> list[Slot]:
        async with self.session_factory() as session:
            return list(await session.scalars(select(Slot).order_by(Slot.created_at)))

    @_storage_guard(None)
    async def get_slot(self, slot_id: str) -> Slot | None:
        async with self.session_factory() as session:
            return await session.get(Slot, slot_id)

    @_storage_guard(list)
    async def list_slots_by_service(self, service_id: str) -> list[Slot]:
        async with self.session_factory() as session:
            stmt = select(Slot).where(Slot.service_id == service_id).order_by(Slot.starts_at)
            return list(await session.scalars(stmt))

    @_storage_guard(None)
    async def create_slot(self, *, service_id: str, starts_at: datetime, capacity: int) -> Slot | None:
        slot = Slot(
            id=generate_id("slt"),
            service_id=service_id,
            starts_at=starts_at,
            capacity=capacity,
            available=capacity,
            created_at=utc_now_naive(),
        )
        async with self.session_factory.begin() as session:
            session.add(slot)
        return slot

    @_storage_guard(False)
    async def delete_slot(self, slot_id: str) -> bool:
        async with self.session_factory.begin() as session:
            if await session.get(Slot, slot_id) is None:
                return False
            await self._cancel_confirmed_on(session, [slot_id])
            await session.execute(delete(Slot).where(Slot.id == slot_id))
        return True

    # ---- reservations

    @_storage_guard(list)
    async def list_reservations(self) -> list[Reservation]:
        async with self.session_factory() as session:
            return list(await session.scalars(select(Reservation).order_by(Reservation.created_at)))

    @_storage_guard(None)
    async def get_reservation(self, reservation_id: str) -> Reservation | None:
        async with self.session_factory() as session:
            return await session.get(Reservation, reservation_id)

    @_storage_guard(list)
    async def list_reservations_by_email(self, user_email: str) -> list[Reservation]:
        stmt = (
            select(Reservation)
            .where(
                Reservation.user_email == user_email,
                Reservation.status != ReservationStatus.CANCELLED,
            )
            .order_by(Reservation.created_at)
        )
        async with self.session_factory() as session:
            return list(await session.scalars(stmt))

    @_storage_guard(list)
    async def list_confirmed_by_slot(self, slot_id: str) -> list[Reservation]:
        stmt = select(Reservation).where(
            Reservation.slot_id == slot_id,
            Reservation.status == ReservationStatus.CONFIRMED,
        )
        async with self.session_factory() as session:
            return list(await session.scalars(stmt))

    @_storage_guard(False)
    async def has_double_booking(self, slot_id: str, user_email: str) -> bool:
        stmt = select(Reservation.id).where(
            Reservation.slot_id == slot_id,
            Reservation.user_email == user_email,
            Reservation.status == ReservationStatus.CONFIRMED,
        )
        async with self.session_factory() as session:
            return await session.scalar(stmt.limit(1)) is not None

    @_storage_guard(None)
    async def create_reservation(self, slot_id: str, user_email: str) -> Reservation | None:
        """Insert a confirmed reservation and take one seat, in one transaction.

        None when the slot does not exist.
        """
        reservation = Reservation(
            id=generate_id("res"),
            slot_id=slot_id,
            user_email=user_email,
            status=ReservationStatus.CONFIRMED,
            created_at=utc_now_naive(),
        )
        async with self.session_factory.begin() as session:
            slot = await session.scalar(select(Slot).where(Slot.id == slot_id).with_for_update())
            if slot is None:
                return None
            session.add(reservation)
            slot.available = seats_after_booking(slot.available)
        return reservation

    @_storage_guard(False)
    async def cancel_reservation(self, reservation_id: str) -> bool:
        """Mark the reservation cancelled and give its seat back, in one transaction."""
        async with self.session_factory.begin() as session:
            reservation = await session.scalar(
                select(Reservation).where(Reservation.id == reservation_id).with_for_update()
            )
            if reservation is None:
                return False
            if reservation.status == ReservationStatus.CANCELLED:
                return True
            reservation.status = ReservationStatus.CANCELLED
            slot = await session.scalar(select(Slot).where(Slot.id == reservation.slot_id).with_for_update())
            if slot is not None:
                slot.available = seats_after_cancellation(slot.available, slot.capacity)
        return True

    @staticmethod
    async def _cancel_confirmed_on(session: AsyncSession, slot_ids: Iterable[str]) -> None:
        ids = list(slot_ids)
        if not ids:
            return
        result = await session.execute(
            update(Reservation)
            .where(
                Reservation.slot_id.in_(ids),
                Reservation.status == ReservationStatus.CONFIRMED,
            )
            .values(status=ReservationStatus.CANCELLED)
        )
        if result.rowcount:
            logger.info("cancelled %d reservations on removed slots", result.rowcount)
