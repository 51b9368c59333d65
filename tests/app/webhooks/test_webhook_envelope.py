"""Testes para o envelope de eventos de webhook."""

from __future__ import annotations

from datetime import datetime

from app.webhooks import build_event_envelope


def test_envelope_has_base_keys_and_fields() -> None:
    envelope = build_event_envelope(
        "message_received",
        instance_id="i-1",
        instance_name="Sales",
        message={"kind": "text", "text": "oi"},
    )

    assert envelope["event"] == "message_received"
    assert envelope["instance"] == {"id": "i-1", "name": "Sales"}
    assert envelope["message"] == {"kind": "text", "text": "oi"}
    assert datetime.fromisoformat(envelope["timestamp"]).tzinfo is not None


def test_fields_cannot_override_base_keys() -> None:
    envelope = build_event_envelope(
        "disconnected",
        instance_id="i-1",
        instance_name="Sales",
        instance="outra",
        timestamp="ontem",
        reason="connection_closed",
    )

    assert envelope["instance"] == {"id": "i-1", "name": "Sales"}
    assert envelope["timestamp"] != "ontem"
    assert envelope["reason"] == "connection_closed"
