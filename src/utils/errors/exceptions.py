"""Exceções de domínio do gerenciador de instâncias.

Apenas erros que atravessam a fronteira do núcleo para o chamador.
Falhas do transporte (logout remoto, link perdido, pareamento expirado)
nunca viram exceção: são contidas no lifecycle e expostas como estado
e eventos de webhook.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fsm.states import InstanceState


class InstanceError(Exception):
    """Base para erros de operação sobre instâncias."""


class DuplicateNameError(InstanceError):
    """Já existe instância ativa com o mesmo nome (case-insensitive)."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Já existe uma instância ativa com o nome '{name}'")
        self.name = name


class InstanceNotFoundError(InstanceError):
    """Nenhuma instância corresponde ao id/nome informado."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Instância não encontrada: {reference}")
        self.reference = reference


class SessionUnavailableError(InstanceError):
    """Instância fora de CONNECTED/DEGRADED; envio recusado."""

    def __init__(self, instance_id: str, state: InstanceState) -> None:
        super().__init__(f"Instância {instance_id} indisponível para envio (estado {state})")
        self.instance_id = instance_id
        self.state = state


class TransportNotReadyError(InstanceError):
    """Socket do transporte não está pronto, mesmo com estado ativo."""
