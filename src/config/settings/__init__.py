"""Agregador de settings do serviço de instâncias.

Re-exporta todas as settings e funções de cada módulo.
"""

from __future__ import annotations

from config.settings.base import (
    DEFAULT_SERVICE_NAME,
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.instances import (
    InstanceSettings,
    TransportBackend,
    get_instance_settings,
)
from config.settings.webhook import (
    WebhookSettings,
    get_webhook_settings,
)

__all__ = [
    "DEFAULT_SERVICE_NAME",
    "BaseSettings",
    "Environment",
    "InstanceSettings",
    "TransportBackend",
    "WebhookSettings",
    "get_base_settings",
    "get_instance_settings",
    "get_webhook_settings",
]
