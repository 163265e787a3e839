from typing import TypeVar

from fastapi import HTTPException, status

from ..schemas import OperationResult

T = TypeVar("T")

STATUS_BY_CODE = {
    "invalid_input": status.HTTP_400_BAD_REQUEST,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "storage_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_result(result: OperationResult) -> None:
    if result.success:
        return
    status_code = STATUS_BY_CODE.get(result.code or "", status.HTTP_400_BAD_REQUEST)
    raise HTTPException(status_code=status_code, detail=result.error)


def require_payload(value: T | None) -> T:
    """Payload of a successful result; its absence is a server fault."""
    if value is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="empty result")
    return value
