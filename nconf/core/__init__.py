"""Core components shared by the loader, the overlay and the logger factory."""
from __future__ import annotations

from .exceptions import (
    ConfigurationError,
    DecodeError,
    FileReadError,
    LoggerConstructionError,
    NconfError,
    TypeMismatchError,
)

__all__ = [
    "NconfError",
    "ConfigurationError",
    "FileReadError",
    "DecodeError",
    "TypeMismatchError",
    "LoggerConstructionError",
]
