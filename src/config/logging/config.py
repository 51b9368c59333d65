"""Configuração centralizada de logging.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização do serviço (app/bootstrap/)
    configure_logging(level="INFO", service_name="pyloto-instances")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("instance_created", extra={"instance_id": "..."})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import ContextFilter
from config.logging.formatters import create_json_formatter
from config.settings.base import DEFAULT_SERVICE_NAME

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    instance_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado para o serviço.

    Deve ser chamada uma vez na inicialização do serviço.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Retorna o correlation_id do contexto atual.
        instance_id_getter: Retorna o instance_id do worker atual.

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(
        ContextFilter(service_name, correlation_id_getter, instance_id_getter)
    )

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado."""
    return logging.getLogger(name)


def log_suppressed_failure(
    logger: logging.Logger,
    component: str,
    exc: BaseException,
    **context: object,
) -> None:
    """Registra falha engolida intencionalmente.

    Usado onde a operação principal deve prosseguir apesar do erro
    (ex: terminate de adapter durante remoção de instância).

    Args:
        logger: Logger do módulo chamador.
        component: Nome do componente (ex: "adapter_terminate").
        exc: Exceção suprimida.
        **context: Campos adicionais (sem payloads sensíveis).
    """
    extra: dict[str, object] = {
        "suppressed": True,
        "component": component,
        "error_type": type(exc).__name__,
        "error": str(exc),
    }
    extra.update(context)

    logger.warning(
        "Failure suppressed in %s",
        component,
        extra=extra,
    )
