"""Configuração de logging estruturado.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="pyloto-instances")
    logger = get_logger(__name__)
    logger.info("instance_created", extra={"instance_id": "abc"})

Campos obrigatórios em todo log:
- service
- correlation_id
- instance_id
- level
- logger
- message
- asctime
"""

from config.logging.config import configure_logging, get_logger, log_suppressed_failure
from config.logging.filters import ContextFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "ContextFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_suppressed_failure",
]
