"""Settings do ciclo de vida de instâncias.

Reconexão, janela de pareamento, probe de liveness e seleção do
backend de transporte.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

TransportBackend = Literal["memory"]

_TRUTHY = ("true", "1", "yes")


@dataclass(frozen=True)
class InstanceSettings:
    """Configurações de instâncias.

    Attributes:
        reconnect_delay_seconds: Atraso base antes de reconectar após perda de link
        reconnect_backoff_factor: Multiplicador por tentativa consecutiva
        reconnect_max_delay_seconds: Teto do atraso de reconexão
        reconnect_max_attempts: Tentativas consecutivas antes de desistir (0 = ilimitado)
        pairing_timeout_seconds: Janela para confirmar pareamento (0 = desativado)
        liveness_probe_enabled: Envia mensagem para o próprio número ao ficar pronto
        pairing_console_qr: Imprime o QR de pareamento no terminal
        transport_backend: Implementação do transporte
    """

    reconnect_delay_seconds: float = 5.0
    reconnect_backoff_factor: float = 2.0
    reconnect_max_delay_seconds: float = 300.0
    reconnect_max_attempts: int = 0
    pairing_timeout_seconds: float = 0.0
    liveness_probe_enabled: bool = False
    pairing_console_qr: bool = False
    transport_backend: TransportBackend = "memory"

    def reconnect_delay_for(self, attempt: int) -> float:
        """Atraso antes da tentativa `attempt` (0 = primeira reconexão)."""
        delay = self.reconnect_delay_seconds * (self.reconnect_backoff_factor ** max(attempt, 0))
        return min(delay, self.reconnect_max_delay_seconds)

    def validate(self) -> list[str]:
        """Valida configurações de instância.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if self.reconnect_delay_seconds < 0:
            errors.append("INSTANCE_RECONNECT_DELAY_SECONDS deve ser >= 0")

        if self.reconnect_backoff_factor < 1:
            errors.append("INSTANCE_RECONNECT_BACKOFF_FACTOR deve ser >= 1")

        if self.reconnect_max_delay_seconds < self.reconnect_delay_seconds:
            errors.append(
                "INSTANCE_RECONNECT_MAX_DELAY_SECONDS deve ser >= INSTANCE_RECONNECT_DELAY_SECONDS"
            )

        if self.reconnect_max_attempts < 0:
            errors.append("INSTANCE_RECONNECT_MAX_ATTEMPTS deve ser >= 0")

        if self.pairing_timeout_seconds < 0:
            errors.append("INSTANCE_PAIRING_TIMEOUT_SECONDS deve ser >= 0")

        if self.transport_backend not in ("memory",):
            errors.append(f"TRANSPORT_BACKEND inválido: {self.transport_backend}")

        return errors


def _load_from_env() -> InstanceSettings:
    """Carrega InstanceSettings a partir de variáveis de ambiente."""
    return InstanceSettings(
        reconnect_delay_seconds=float(os.getenv("INSTANCE_RECONNECT_DELAY_SECONDS", "5")),
        reconnect_backoff_factor=float(os.getenv("INSTANCE_RECONNECT_BACKOFF_FACTOR", "2")),
        reconnect_max_delay_seconds=float(
            os.getenv("INSTANCE_RECONNECT_MAX_DELAY_SECONDS", "300")
        ),
        reconnect_max_attempts=int(os.getenv("INSTANCE_RECONNECT_MAX_ATTEMPTS", "0")),
        pairing_timeout_seconds=float(os.getenv("INSTANCE_PAIRING_TIMEOUT_SECONDS", "0")),
        liveness_probe_enabled=os.getenv("INSTANCE_LIVENESS_PROBE", "").lower() in _TRUTHY,
        pairing_console_qr=os.getenv("INSTANCE_PAIRING_CONSOLE_QR", "").lower() in _TRUTHY,
        transport_backend=os.getenv("TRANSPORT_BACKEND", "memory").lower(),  # type: ignore[arg-type]
    )


@lru_cache(maxsize=1)
def get_instance_settings() -> InstanceSettings:
    """Retorna instância cacheada de InstanceSettings."""
    return _load_from_env()
