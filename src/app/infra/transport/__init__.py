"""Transport — implementações concretas do adapter de transporte.

Módulos disponíveis:
    - memory: Transporte em memória para desenvolvimento/testes
"""

from __future__ import annotations

from app.infra.transport.memory import (
    MemoryTransport,
    MemoryTransportFactory,
    SentMessage,
)

__all__ = [
    "MemoryTransport",
    "MemoryTransportFactory",
    "SentMessage",
]
