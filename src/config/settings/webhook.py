"""Settings de entrega de webhooks.

Por padrão cada evento recebe exatamente uma tentativa de entrega.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class WebhookSettings:
    """Configurações do dispatcher de webhooks.

    Attributes:
        timeout_seconds: Timeout de cada requisição de entrega
        max_retries: Novas tentativas após falha transitória (0 = tentativa única)
        backoff_base_seconds: Base do backoff exponencial entre tentativas
        backoff_max_seconds: Teto do backoff
        max_concurrent_deliveries: Entregas simultâneas em background
    """

    timeout_seconds: float = 15.0
    max_retries: int = 0
    backoff_base_seconds: float = 2.0
    backoff_max_seconds: float = 30.0
    max_concurrent_deliveries: int = 100

    def validate(self) -> list[str]:
        """Valida configurações de webhook."""
        errors: list[str] = []

        if self.timeout_seconds <= 0:
            errors.append("WEBHOOK_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("WEBHOOK_MAX_RETRIES deve ser >= 0")

        if self.backoff_base_seconds < 0:
            errors.append("WEBHOOK_BACKOFF_BASE_SECONDS deve ser >= 0")

        if self.max_concurrent_deliveries < 1:
            errors.append("WEBHOOK_MAX_CONCURRENT_DELIVERIES deve ser >= 1")

        return errors


def _load_from_env() -> WebhookSettings:
    """Carrega WebhookSettings a partir de variáveis de ambiente."""
    return WebhookSettings(
        timeout_seconds=float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "15")),
        max_retries=int(os.getenv("WEBHOOK_MAX_RETRIES", "0")),
        backoff_base_seconds=float(os.getenv("WEBHOOK_BACKOFF_BASE_SECONDS", "2")),
        backoff_max_seconds=float(os.getenv("WEBHOOK_BACKOFF_MAX_SECONDS", "30")),
        max_concurrent_deliveries=int(os.getenv("WEBHOOK_MAX_CONCURRENT_DELIVERIES", "100")),
    )


@lru_cache(maxsize=1)
def get_webhook_settings() -> WebhookSettings:
    """Retorna instância cacheada de WebhookSettings."""
    return _load_from_env()
