from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status

from ..config import get_settings
from ..deps import get_current_role, get_optional_user, get_store
from ..domain.errors import DomainError
from ..domain.repositories import BookingStore
from ..models import User
from ..schemas import CurrentUserRead, LoginRequest, TokenRead, UserRead
from ..usecases.auth import find_or_create_user
from ..utils.auth import create_access_token
from .errors import STATUS_BY_CODE

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenRead)
async def login(payload: LoginRequest, store: BookingStore = Depends(get_store)) -> TokenRead:
    try:
        user = await find_or_create_user(store, email=payload.email)
    except DomainError as exc:
        raise HTTPException(status_code=STATUS_BY_CODE.get(exc.code, 400), detail=exc.message) from exc

    settings = get_settings()
    token = create_access_token(
        email=user.email,
        role=str(user.role),
        secret=settings.auth_secret,
        algorithm=settings.auth_algorithm,
        expires_delta=timedelta(minutes=settings.access_token_minutes),
    )
    return TokenRead(access_token=token, user=UserRead.from_db(user=user))


@router.post("/logout")
async def logout() -> dict[str, str]:
    # tokens are stateless; the client drops its copy
    return {"status": "ok"}


@router.get("/me", response_model=CurrentUserRead)
async def me(
    user: User | None = Depends(get_optional_user),
    role: str = Depends(get_current_role),
) -> CurrentUserRead:
    return CurrentUserRead(email=user.email if user is not None else None, role=role)
