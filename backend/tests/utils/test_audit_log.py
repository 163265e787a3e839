import json
from typing import Any, List

import pytest
from booking_app.models import ReservationStatus
from booking_app.utils import audit_log
from booking_app.utils.request_id import set_request_id


def test_emit_audit_log_outputs_json(monkeypatch: pytest.MonkeyPatch) -> None:
    messages: List[str] = []

    class DummyLogger:
        def info(self, message: str) -> None:
            messages.append(message)

    monkeypatch.setattr(audit_log, "_audit_logger", DummyLogger())

    set_request_id("req-123")
    audit_log.emit_audit_log(
        action="reservation.created",
        initiator="user",
        user_email="alice@example.com",
        reservation_id="res_1",
        slot_id="slt_1",
        status_from=None,
        status_to=ReservationStatus.CONFIRMED,
    )
    set_request_id(None)

    assert len(messages) == 1
    payload = json.loads(messages[0])
    assert payload["action"] == "reservation.created"
    assert payload["initiator"] == "user"
    assert payload["request_id"] == "req-123"
    assert payload["status_to"] == "confirmed"
    assert "status_from" not in payload
    assert "service_id" not in payload
    assert "timestamp" in payload


def test_emit_audit_log_merges_extra(monkeypatch: pytest.MonkeyPatch) -> None:
    messages: List[str] = []

    class DummyLogger:
        def info(self, message: str) -> None:
            messages.append(message)

    monkeypatch.setattr(audit_log, "_audit_logger", DummyLogger())

    audit_log.emit_audit_log(
        action="service.deleted",
        initiator="admin",
        user_email="admin@example.com",
        service_id="svc_1",
        extra={"slots_removed": 3},
    )
    payload = json.loads(messages[0])
    assert payload["service_id"] == "svc_1"
    assert payload["slots_removed"] == 3


def test_emit_audit_log_raises_on_logger_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    class DummyLogger:
        def info(self, _: Any) -> None:
            raise ValueError("fail")

    monkeypatch.setattr(audit_log, "_audit_logger", DummyLogger())

    with pytest.raises(RuntimeError):
        audit_log.emit_audit_log(
            action="reservation.cancelled",
            initiator="user",
            user_email="alice@example.com",
            reservation_id="res_1",
            status_from=ReservationStatus.CONFIRMED,
            status_to=ReservationStatus.CANCELLED,
        )
