"""Envelope JSON dos eventos de domínio entregues ao webhook."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any


def build_event_envelope(
    event: str,
    *,
    instance_id: str,
    instance_name: str,
    **fields: Any,
) -> dict[str, Any]:
    """Monta `{event, instance: {id, name}, timestamp, ...campos}`.

    Campos específicos do evento não podem sobrescrever as chaves base.
    """
    envelope: dict[str, Any] = {
        key: value
        for key, value in fields.items()
        if key not in ("event", "instance", "timestamp")
    }
    envelope["event"] = str(event)
    envelope["instance"] = {"id": instance_id, "name": instance_name}
    envelope["timestamp"] = datetime.now(UTC).isoformat()
    return envelope
