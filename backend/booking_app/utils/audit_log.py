from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from .request_id import get_request_id

AuditAction = Literal[
    "reservation.created",
    "reservation.cancelled",
    "service.created",
    "service.deleted",
    "slot.created",
    "slot.deleted",
]
AuditInitiator = Literal["user", "admin", "system"]


def _build_audit_logger() -> logging.Logger:
    """One JSON document per line on stderr, kept out of the root handlers."""
    audit = logging.getLogger("audit")
    audit.setLevel(logging.INFO)
    if not audit.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter("%(message)s"))
        audit.addHandler(stream)
    audit.propagate = False
    return audit


_audit_logger = _build_audit_logger()


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def emit_audit_log(
    *,
    action: AuditAction,
    initiator: AuditInitiator,
    user_email: Optional[str],
    reservation_id: Optional[str] = None,
    slot_id: Optional[str] = None,
    service_id: Optional[str] = None,
    status_from: Optional[str] = None,
    status_to: Optional[str] = None,
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Write one audit record for a state change.

    Unset fields are omitted. Raises RuntimeError when the record cannot be
    written, so callers can refuse to report success for an unaudited change.
    """
    record: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": "info",
        "action": action,
        "initiator": initiator,
        "request_id": get_request_id(),
        "user_email": user_email,
        "reservation_id": reservation_id,
        "slot_id": slot_id,
        "service_id": service_id,
        "status_from": _plain(status_from),
        "status_to": _plain(status_to),
        "message": message,
    }
    record.update(extra or {})

    line = json.dumps({k: v for k, v in record.items() if v is not None}, ensure_ascii=True, default=str)
    try:
        _audit_logger.info(line)
    except Exception as exc:
        raise RuntimeError("failed to emit audit log") from exc
