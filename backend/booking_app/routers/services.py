from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ..deps import get_current_role, get_current_user_email, get_store
from ..domain.repositories import BookingStore
from ..schemas import ServiceCreate, ServiceRead, ServiceWithSlots, SlotCreate, SlotRead
from ..usecases import catalog as catalog_usecase
from ..utils.audit_log import emit_audit_log
from .errors import raise_for_result, require_payload

router = APIRouter(prefix="/services", tags=["services"])


@router.get("", response_model=List[ServiceRead])
async def list_services(store: BookingStore = Depends(get_store)) -> list[ServiceRead]:
    return await catalog_usecase.list_services(store)


@router.get("/{service_id}", response_model=ServiceWithSlots)
async def get_service(
    service_id: str = Path(..., min_length=1),
    store: BookingStore = Depends(get_store),
) -> ServiceWithSlots:
    service = await catalog_usecase.get_service_with_slots(store, service_id=service_id)
    if service is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="service not found")
    return service


@router.post("", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceCreate,
    store: BookingStore = Depends(get_store),
    role: str = Depends(get_current_role),
    user_email: str = Depends(get_current_user_email),
) -> ServiceRead:
    result = await catalog_usecase.create_service(
        store,
        name=payload.name,
        description=payload.description,
        duration=payload.duration,
        actor_role=role,
    )
    raise_for_result(result)
    service = require_payload(result.service)
    try:
        emit_audit_log(
            action="service.created",
            initiator="admin",
            user_email=user_email,
            service_id=service.id,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return service


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(
    service_id: str = Path(..., min_length=1),
    store: BookingStore = Depends(get_store),
    role: str = Depends(get_current_role),
    user_email: str = Depends(get_current_user_email),
) -> None:
    result = await catalog_usecase.delete_service(store, service_id=service_id, actor_role=role)
    raise_for_result(result)
    try:
        emit_audit_log(action="service.deleted", initiator="admin", user_email=user_email, service_id=service_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc


@router.post("/{service_id}/slots", response_model=SlotRead, status_code=status.HTTP_201_CREATED)
async def add_slot(
    payload: SlotCreate,
    service_id: str = Path(..., min_length=1),
    store: BookingStore = Depends(get_store),
    role: str = Depends(get_current_role),
    user_email: str = Depends(get_current_user_email),
) -> SlotRead:
    result = await catalog_usecase.add_slot(
        store,
        service_id=service_id,
        starts_at=payload.starts_at,
        capacity=payload.capacity,
        actor_role=role,
    )
    raise_for_result(result)
    slot = require_payload(result.slot)
    try:
        emit_audit_log(
            action="slot.created",
            initiator="admin",
            user_email=user_email,
            service_id=service_id,
            slot_id=slot.id,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
    return slot
