"""Classificação de mensagens brutas do transporte.

Converte o dict do provedor em NormalizedMessage ({kind, text|summary}).
Tipos sem texto próprio recebem um marcador `[tipo]`; só mensagens sem
tipo utilizável são descartadas (retorno None).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

TEXT_TYPES = frozenset({"text", "chat"})

# Tipo bruto → kind normalizado
MEDIA_TYPES: dict[str, str] = {
    "image": "image",
    "video": "video",
    "audio": "audio",
    "ptt": "audio",
    "document": "document",
    "sticker": "sticker",
}

SYSTEM_TYPES = frozenset(
    {
        "e2e_notification",
        "notification_template",
        "gp2",
        "call_log",
        "protocol",
        "revoked",
        "ciphertext",
    }
)


@dataclass(frozen=True, slots=True)
class NormalizedMessage:
    """Mensagem normalizada para o webhook.

    `text` é preenchido para mensagens de texto; `summary` para os demais
    tipos (legenda ou marcador).
    """

    kind: str
    message_id: str
    sender: str
    from_me: bool
    timestamp: Any = None
    text: str | None = None
    summary: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "kind": self.kind,
            "message_id": self.message_id,
            "sender": self.sender,
            "from_me": self.from_me,
            "timestamp": self.timestamp,
        }
        if self.text is not None:
            payload["text"] = self.text
        else:
            payload["summary"] = self.summary
        return payload


def _message_id(raw: Mapping[str, Any]) -> str:
    value = raw.get("id")
    if isinstance(value, Mapping):
        value = value.get("_serialized") or value.get("id")
    return str(value) if value is not None else ""


def _from_me(raw: Mapping[str, Any]) -> bool:
    if "from_me" in raw:
        return bool(raw["from_me"])
    return bool(raw.get("fromMe", False))


def _describe_location(raw: Mapping[str, Any]) -> str:
    location = raw.get("location")
    if not isinstance(location, Mapping):
        location = raw
    lat = location.get("latitude", location.get("lat", ""))
    lng = location.get("longitude", location.get("lng", ""))
    summary = f"[location] {lat},{lng}"
    name = location.get("name") or location.get("description")
    if name:
        summary += f" ({name})"
    return summary


def _summarize(msg_type: str, raw: Mapping[str, Any]) -> tuple[str, str | None, str | None]:
    """Retorna (kind, text, summary) para um tipo bruto."""
    body = raw.get("body")
    if msg_type in TEXT_TYPES:
        return "text", str(body or ""), None

    if msg_type in MEDIA_TYPES:
        kind = MEDIA_TYPES[msg_type]
        caption = raw.get("caption") or (body if msg_type != "sticker" else None)
        return kind, None, str(caption) if caption else f"[{kind}]"

    if msg_type == "location":
        return "location", None, _describe_location(raw)

    if msg_type == "reaction":
        emoji = raw.get("reaction") or raw.get("emoji") or body
        return "reaction", None, str(emoji) if emoji else "[reaction]"

    if msg_type in SYSTEM_TYPES:
        return "system", None, f"[system:{msg_type}]"

    return "unhandled", None, f"[unhandled:{msg_type}]"


def classify_message(raw: Any) -> NormalizedMessage | None:
    """Classifica uma mensagem bruta do transporte.

    Args:
        raw: Payload do provedor (espera-se um mapping com `type`)

    Returns:
        NormalizedMessage, ou None quando o payload não tem tipo utilizável
    """
    if not isinstance(raw, Mapping):
        return None

    msg_type = raw.get("type")
    if not isinstance(msg_type, str) or not msg_type.strip():
        return None

    kind, text, summary = _summarize(msg_type.strip().lower(), raw)
    return NormalizedMessage(
        kind=kind,
        message_id=_message_id(raw),
        sender=str(raw.get("from") or raw.get("sender") or ""),
        from_me=_from_me(raw),
        timestamp=raw.get("timestamp"),
        text=text,
        summary=summary,
    )
