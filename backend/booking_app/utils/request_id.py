from __future__ import annotations

import re
import uuid
from contextvars import ContextVar, Token
from typing import Optional

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_LENGTH = 128
_ALLOWED = re.compile(r"^[A-Za-z0-9._:-]+$")

_request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def generate_request_id() -> str:
    """Generate a random request id."""
    return uuid.uuid4().hex


def normalize_request_id(raw: str | None) -> str:
    """Accept a caller-supplied id when it is short and printable, otherwise mint one."""
    if raw is None:
        return generate_request_id()
    candidate = raw.strip()
    if not candidate or len(candidate) > _MAX_LENGTH or not _ALLOWED.match(candidate):
        return generate_request_id()
    return candidate


def set_request_id(request_id: str | None) -> Token[str | None]:
    """Store request id in context (None to clear); returns the reset token."""
    return _request_id_ctx.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> Optional[str]:
    """Return current request id if set."""
    return _request_id_ctx.get()
