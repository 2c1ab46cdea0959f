import json
from datetime import date
from typing import Any, List

import pytest
from restaurant_backend.models import ReservationStatus
from restaurant_backend.utils import audit_log
from restaurant_backend.utils.request_id import set_request_id


def test_emit_audit_log_outputs_json(monkeypatch) -> None:
    messages: List[str] = []

    class DummyLogger:
        def info(self, message: str) -> None:
            messages.append(message)

    dummy_logger = DummyLogger()
    monkeypatch.setattr(audit_log, "_audit_logger", dummy_logger)

    set_request_id("req-123")
    audit_log.emit_audit_log(
        action="reservation.created",
        initiator="guest",
        entity_id=1,
        booking_date=date(2025, 6, 10),
        slot="19:00",
        party_size=2,
        status_from=None,
        status_to=ReservationStatus.PENDING,
    )
    set_request_id(None)
    assert len(messages) == 1
    payload = json.loads(messages[0])
    assert payload["action"] == "reservation.created"
    assert payload["initiator"] == "guest"
    assert payload["request_id"] == "req-123"
    assert payload["status_to"] == "pendiente"
    assert payload["date"] == "2025-06-10"
    assert "status_from" not in payload
    assert "timestamp" in payload


def test_emit_audit_log_raises_on_logger_failure(monkeypatch) -> None:
    class DummyLogger:
        def info(self, _: Any) -> None:
            raise ValueError("fail")

    dummy_logger = DummyLogger()
    monkeypatch.setattr(audit_log, "_audit_logger", dummy_logger)

    with pytest.raises(RuntimeError):
        audit_log.emit_audit_log(
            action="reservation.cancelled",
            initiator="staff",
            entity_id=1,
            status_from=ReservationStatus.PENDING,
            status_to=ReservationStatus.CANCELLED,
        )
