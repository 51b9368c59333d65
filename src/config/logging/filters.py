"""Filters de logging para injeção de contexto.

Campos injetados:
- service: Nome do serviço
- correlation_id: ID de rastreamento da requisição HTTP
- instance_id: Instância cujo worker emitiu o log

Payloads de pareamento e conteúdo de mensagens nunca vão para logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class ContextFilter(logging.Filter):
    """Injeta service, correlation_id e instance_id em cada record.

    Valores passados explicitamente via `extra` têm precedência sobre
    os obtidos do contexto.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        instance_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")
        self._get_instance_id = instance_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record; nunca descarta."""
        existing_corr = getattr(record, "correlation_id", None)
        record.correlation_id = existing_corr if existing_corr else self._get_correlation_id()
        existing_instance = getattr(record, "instance_id", None)
        record.instance_id = existing_instance if existing_instance else self._get_instance_id()
        record.service = self._service_name
        return True
