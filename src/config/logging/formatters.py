"""Formatters de logging estruturado (JSON)."""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# Campos obrigatórios em todo log estruturado
REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "service",
    "correlation_id",
    "instance_id",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {
            "asctime": "2026-10-17 10:30:00,123",
            "level": "INFO",
            "logger": "app.instances.lifecycle",
            "message": "instance_state_changed",
            "service": "pyloto-instances",
            "correlation_id": "",
            "instance_id": "3f0c...",
            "from_state": "AWAITING_PAIRING",
            "to_state": "CONNECTED"
        }
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)

    return JsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
    )
