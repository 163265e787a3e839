import logging
from datetime import datetime

from ..domain.errors import (
    EMPTY_SERVICE_NAME,
    INVALID_CAPACITY,
    INVALID_DATETIME,
    INVALID_DURATION,
    NOT_FOUND,
    SERVICE_NOT_FOUND,
    SLOT_NOT_FUTURE,
    DomainError,
    InvalidInputError,
    NotFoundError,
    StorageError,
)
from ..domain.repositories import BookingStore
from ..domain.services import require_admin
from ..domain.validators import is_valid_capacity, is_valid_duration, is_valid_service_name
from ..models import Service, Slot
from ..schemas import OperationResult, ServiceRead, ServiceResult, ServiceWithSlots, SlotRead, SlotResult
from ..utils.time import is_future, parse_instant

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 30
DEFAULT_CAPACITY = 1


async def list_services(store: BookingStore) -> list[ServiceRead]:
    return [ServiceRead.from_db(service=s) for s in await store.list_services()]


async def get_service(store: BookingStore, *, service_id: str) -> ServiceRead | None:
    service = await store.get_service(service_id)
    return ServiceRead.from_db(service=service) if service is not None else None


async def get_service_with_slots(store: BookingStore, *, service_id: str) -> ServiceWithSlots | None:
    service = await store.get_service(service_id)
    if service is None:
        return None
    slots = await store.list_slots_by_service(service_id)
    return ServiceWithSlots(
        **ServiceRead.from_db(service=service).model_dump(),
        slots=[SlotRead.from_db(slot=s) for s in slots],
    )


async def list_slots_by_service(store: BookingStore, *, service_id: str) -> list[SlotRead]:
    return [SlotRead.from_db(slot=s) for s in await store.list_slots_by_service(service_id)]


async def list_available_slots(store: BookingStore) -> list[SlotRead]:
    """Slots with at least one free seat, past ones included."""
    return [SlotRead.from_db(slot=s) for s in await store.list_slots() if s.available > 0]


async def create_service(
    store: BookingStore,
    *,
    name: str | None,
    description: str | None = None,
    duration: int | float | None = None,
    actor_role: str | None,
) -> ServiceResult:
    try:
        require_admin(actor_role)
        if name is None or not is_valid_service_name(name):
            raise InvalidInputError(EMPTY_SERVICE_NAME)
        if duration is not None and not is_valid_duration(duration):
            raise InvalidInputError(INVALID_DURATION)
        service = await store.create_service(
            name=name.strip(),
            description=description or "",
            duration_minutes=int(duration) if duration is not None else DEFAULT_DURATION_MINUTES,
        )
        if service is None:
            raise StorageError("failed to create service")
    except DomainError as exc:
        return ServiceResult.failure(exc)
    logger.info("service %s created", service.id)
    return ServiceResult(success=True, service=ServiceRead.from_db(service=service))


async def delete_service(store: BookingStore, *, service_id: str, actor_role: str | None) -> OperationResult:
    """Delete a service; its slots go with it."""
    try:
        require_admin(actor_role)
        if await store.get_service(service_id) is None:
            raise NotFoundError(NOT_FOUND)
        if not await store.delete_service(service_id):
            raise StorageError("failed to delete service")
    except DomainError as exc:
        return OperationResult.failure(exc)
    return OperationResult(success=True)


async def add_slot(
    store: BookingStore,
    *,
    service_id: str,
    starts_at: str | datetime | None,
    capacity: int | None = None,
    actor_role: str | None,
) -> SlotResult:
    try:
        require_admin(actor_role)
        slot = await _add_slot(store, service_id=service_id, starts_at=starts_at, capacity=capacity)
    except DomainError as exc:
        return SlotResult.failure(exc)
    logger.info("slot %s added to service %s", slot.id, service_id)
    return SlotResult(success=True, slot=SlotRead.from_db(slot=slot))


async def _add_slot(
    store: BookingStore,
    *,
    service_id: str,
    starts_at: str | datetime | None,
    capacity: int | None,
) -> Slot:
    service: Service | None = await store.get_service(service_id)
    if service is None:
        raise NotFoundError(SERVICE_NOT_FOUND)

    instant = parse_instant(starts_at)
    if instant is None:
        raise InvalidInputError(INVALID_DATETIME)
    if not is_future(instant):
        raise InvalidInputError(SLOT_NOT_FUTURE)

    if capacity is None:
        capacity = DEFAULT_CAPACITY
    elif not is_valid_capacity(capacity):
        raise InvalidInputError(INVALID_CAPACITY)

    slot = await store.create_slot(service_id=service_id, starts_at=instant, capacity=int(capacity))
    if slot is None:
        raise StorageError("failed to create slot")
    return slot


async def delete_slot(store: BookingStore, *, slot_id: str, actor_role: str | None) -> OperationResult:
    try:
        require_admin(actor_role)
        if await store.get_slot(slot_id) is None:
            raise NotFoundError(NOT_FOUND)
        if not await store.delete_slot(slot_id):
            raise StorageError("failed to delete slot")
    except DomainError as exc:
        return OperationResult.failure(exc)
    return OperationResult(success=True)
