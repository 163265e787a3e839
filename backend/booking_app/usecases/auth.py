import logging

from ..domain.errors import InvalidInputError, StorageError
from ..domain.repositories import BookingStore
from ..domain.validators import validate_email_with_message
from ..models import User, UserRole
from ..schemas import LoginResult, UserRead

logger = logging.getLogger(__name__)

GUEST_ROLE = "guest"


async def find_or_create_user(store: BookingStore, *, email: str) -> User:
    """Return the user for `email`, creating a plain `user` on first sight."""
    error = validate_email_with_message(email)
    if error is not None:
        raise InvalidInputError(error)
    user = await store.get_user_by_email(email)
    if user is None:
        user = await store.create_user(email=email, role=UserRole.USER)
        if user is None:
            raise StorageError("failed to create user")
        logger.info("registered user %s", email)
    return user


class AuthSession:
    """Holds the "current user" pointer for a single interactive session.

    Booking and catalog operations never read it; callers pass the email
    (and role) explicitly.
    """

    def __init__(self, store: BookingStore) -> None:
        self.store = store
        self.current_user: User | None = None

    async def login(self, email: str) -> LoginResult:
        try:
            user = await find_or_create_user(self.store, email=email)
        except (InvalidInputError, StorageError) as exc:
            return LoginResult.failure(exc)
        self.current_user = user
        return LoginResult(success=True, user=UserRead.from_db(user=user))

    def logout(self) -> bool:
        self.current_user = None
        return True

    def is_authenticated(self) -> bool:
        return self.current_user is not None

    def is_admin(self) -> bool:
        return self.current_user is not None and self.current_user.role == UserRole.ADMIN

    def current_user_email(self) -> str | None:
        return self.current_user.email if self.current_user is not None else None

    def current_role(self) -> str:
        return str(self.current_user.role) if self.current_user is not None else GUEST_ROLE
