"""Protocolos e contratos do core da aplicação."""

from .transport import (
    EventSink,
    SendReceipt,
    TransportAdapterProtocol,
    TransportFactoryProtocol,
)

__all__ = [
    "EventSink",
    "SendReceipt",
    "TransportAdapterProtocol",
    "TransportFactoryProtocol",
]
