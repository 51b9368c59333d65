"""Normalização de destinos de envio."""

from __future__ import annotations

import re

from app.instances.models import JID_SUFFIX

_NON_DIGITS = re.compile(r"\D")


def format_destination(destination: str) -> str:
    """Converte número em endereço do provedor.

    Valores que já contêm `@` (grupos, JIDs completos) passam intactos;
    números simples são reduzidos a dígitos e recebem o sufixo de conta.

    Raises:
        ValueError: Destino vazio ou sem dígitos.
    """
    value = (destination or "").strip()
    if not value:
        raise ValueError("destino vazio")
    if "@" in value:
        return value

    digits = _NON_DIGITS.sub("", value)
    if not digits:
        raise ValueError(f"destino sem dígitos: {destination!r}")
    return f"{digits}{JID_SUFFIX}"
