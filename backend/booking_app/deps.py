from fastapi import Depends, Header, HTTPException, status

from .config import get_settings
from .database import async_session
from .domain.repositories import BookingStore
from .infrastructure.repositories import SqlAlchemyBookingStore
from .models import User
from .usecases.auth import GUEST_ROLE
from .utils.auth import decode_access_token


async def get_store() -> BookingStore:
    return SqlAlchemyBookingStore(async_session)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: str | None = Header(default=None),
    store: BookingStore = Depends(get_store),
) -> User:
    if authorization is None:
        raise _unauthorized("bearer token required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise _unauthorized("bearer token required")

    settings = get_settings()
    try:
        email = decode_access_token(token, secret=settings.auth_secret, algorithms=[settings.auth_algorithm])
    except ValueError as exc:
        raise _unauthorized("invalid token") from exc

    user = await store.get_user_by_email(email)
    if user is None:
        raise _unauthorized("user not found")
    return user


async def get_current_user_email(user: User = Depends(get_current_user)) -> str:
    return user.email


async def get_optional_user(
    authorization: str | None = Header(default=None),
    store: BookingStore = Depends(get_store),
) -> User | None:
    if authorization is None:
        return None
    return await get_current_user(authorization=authorization, store=store)


async def get_current_role(user: User | None = Depends(get_optional_user)) -> str:
    return str(user.role) if user is not None else GUEST_ROLE
