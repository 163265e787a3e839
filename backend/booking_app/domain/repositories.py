from __future__ import annotations

from datetime import datetime
from typing import Protocol

from ..models import Reservation, Service, Slot, User, UserRole


class BookingStore(Protocol):
    """Sole read/write path to the four collections.

    Every mutating call is atomic on its own. Storage failures never raise:
    they read as None, False or an empty list.
    """

    # users
    async def list_users(self) -> list[User]: ...

    async def get_user_by_email(self, email: str) -> User | None: ...

    async def create_user(self, *, email: str, role: UserRole = UserRole.USER) -> User | None: ...

    # services
    async def list_services(self) -> list[Service]: ...

    async def get_service(self, service_id: str) -> Service | None: ...

    async def create_service(
        self,
        *,
        name: str,
        description: str,
        duration_minutes: int,
    ) -> Service | None: ...

    async def delete_service(self, service_id: str) -> bool: ...

    # slots
    async def list_slots(self) -> list[Slot]: ...

    async def get_slot(self, slot_id: str) -> Slot | None: ...

    async def list_slots_by_service(self, service_id: str) -> list[Slot]: ...

    async def create_slot(self, *, service_id: str, starts_at: datetime, capacity: int) -> Slot | None: ...

    async def delete_slot(self, slot_id: str) -> bool: ...

    # reservations
    async def list_reservations(self) -> list[Reservation]: ...

    async def get_reservation(self, reservation_id: str) -> Reservation | None: ...

    async def list_reservations_by_email(self, user_email: str) -> list[Reservation]: ...

    async def list_confirmed_by_slot(self, slot_id: str) -> list[Reservation]: ...

    async def has_double_booking(self, slot_id: str, user_email: str) -> bool: ...

    async def create_reservation(self, slot_id: str, user_email: str) -> Reservation | None: ...

    async def cancel_reservation(self, reservation_id: str) -> bool: ...
