from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ..deps import get_current_role, get_current_user_email, get_store
from ..domain.repositories import BookingStore
from ..schemas import SlotDetails, SlotWithService
from ..usecases import bookings as booking_usecase
from ..usecases import catalog as catalog_usecase
from ..utils.audit_log import emit_audit_log
from .errors import raise_for_result

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/available", response_model=List[SlotWithService])
async def list_available_slots(store: BookingStore = Depends(get_store)) -> list[SlotWithService]:
    return await booking_usecase.get_all_available_slots_with_details(store)


@router.get("/{slot_id}", response_model=SlotDetails)
async def get_slot(
    slot_id: str = Path(..., min_length=1),
    store: BookingStore = Depends(get_store),
) -> SlotDetails:
    details = await booking_usecase.get_slot_details(store, slot_id=slot_id)
    if details is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="slot not found")
    return details


@router.delete("/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_slot(
    slot_id: str = Path(..., min_length=1),
    store: BookingStore = Depends(get_store),
    role: str = Depends(get_current_role),
    user_email: str = Depends(get_current_user_email),
) -> None:
    result = await catalog_usecase.delete_slot(store, slot_id=slot_id, actor_role=role)
    raise_for_result(result)
    try:
        emit_audit_log(action="slot.deleted", initiator="admin", user_email=user_email, slot_id=slot_id)
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc
