"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings
e conecta o transporte concreto e o dispatcher ao registry.

Uso:
    from app.bootstrap import initialize_app, create_registry

    # Na inicialização do serviço
    initialize_app()

    # No lifespan da aplicação
    registry = create_registry()
"""

from __future__ import annotations

import logging

from app.infra.transport import MemoryTransportFactory
from app.instances import InstanceRegistry
from app.observability import get_correlation_id, get_instance_id
from app.protocols import TransportFactoryProtocol
from app.webhooks import WebhookDispatcher
from config.logging import configure_logging
from config.settings import (
    InstanceSettings,
    get_base_settings,
    get_instance_settings,
    get_webhook_settings,
)

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa logging estruturado JSON com correlation_id e instance_id.

    Deve ser chamada uma vez no início do serviço.
    """
    base = get_base_settings()
    configure_logging(
        level=base.log_level,
        service_name=base.service_name,
        correlation_id_getter=get_correlation_id,
        instance_id_getter=get_instance_id,
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development`/`test` mantém alerta sem bloquear execução local.
    """
    base = get_base_settings()
    errors: list[str] = []
    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"instances: {error}" for error in get_instance_settings().validate())
    errors.extend(f"webhook: {error}" for error in get_webhook_settings().validate())

    environment = base.environment
    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if base.is_strict:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


def create_transport_factory(settings: InstanceSettings | None = None) -> TransportFactoryProtocol:
    """Seleciona a implementação de transporte configurada."""
    settings = settings or get_instance_settings()
    if settings.transport_backend == "memory":
        return MemoryTransportFactory()
    raise ValueError(f"TRANSPORT_BACKEND não suportado: {settings.transport_backend}")


def create_registry(
    transport_factory: TransportFactoryProtocol | None = None,
    dispatcher: WebhookDispatcher | None = None,
) -> InstanceRegistry:
    """Monta o registry com transporte e dispatcher padrão."""
    settings = get_instance_settings()
    return InstanceRegistry(
        adapter_factory=transport_factory or create_transport_factory(settings),
        dispatcher=dispatcher or WebhookDispatcher(get_webhook_settings()),
        settings=settings,
    )
