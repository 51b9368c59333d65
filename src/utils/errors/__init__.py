"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    DuplicateNameError,
    InstanceError,
    InstanceNotFoundError,
    SessionUnavailableError,
    TransportNotReadyError,
)

__all__ = [
    "DuplicateNameError",
    "InstanceError",
    "InstanceNotFoundError",
    "SessionUnavailableError",
    "TransportNotReadyError",
]
