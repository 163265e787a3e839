from datetime import datetime, timedelta, timezone
from typing import Sequence

import jwt
from jwt import InvalidTokenError

DEFAULT_TOKEN_TTL = timedelta(minutes=30)


def create_access_token(
    *,
    email: str,
    role: str,
    secret: str,
    algorithm: str = "HS256",
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a bearer token whose subject is the user's email."""
    issued = datetime.now(timezone.utc)
    claims = {
        "sub": email,
        "role": role,
        "iat": issued,
        "exp": issued + (expires_delta if expires_delta is not None else DEFAULT_TOKEN_TTL),
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_access_token(token: str, *, secret: str, algorithms: Sequence[str]) -> str:
    """Return the email carried by `token`; ValueError for anything unusable."""
    try:
        claims = jwt.decode(token, secret, algorithms=list(algorithms), options={"require": ["sub", "exp"]})
    except InvalidTokenError as exc:  # expired, bad signature, missing claims
        raise ValueError("invalid token") from exc

    email = claims["sub"]
    if not isinstance(email, str) or not email:
        raise ValueError("token subject is not an email")
    return email
