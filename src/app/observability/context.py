"""Contexto de rastreamento propagado via ContextVar.

- correlation_id: definido por requisição HTTP (header x-correlation-id)
- instance_id: definido pelo worker de cada instância; toda linha de log
  emitida durante o processamento de um evento carrega a instância.

Uso:
    token = set_correlation_id(request.headers.get("x-correlation-id"))
    try:
        ...
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_instance_id: ContextVar[str] = ContextVar("instance_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (ou string vazia)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id; gera UUID quando None."""
    return _correlation_id.set(correlation_id or str(uuid.uuid4()))


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def get_instance_id() -> str:
    """Retorna o instance_id vinculado ao contexto atual (ou string vazia)."""
    return _instance_id.get()


def bind_instance_id(instance_id: str) -> Token[str]:
    """Vincula o instance_id ao contexto atual.

    Tasks criadas depois herdam o valor (cópia do contexto na criação).
    """
    return _instance_id.set(instance_id)


def reset_instance_id(token: Token[str]) -> None:
    """Restaura o instance_id ao valor anterior."""
    _instance_id.reset(token)
