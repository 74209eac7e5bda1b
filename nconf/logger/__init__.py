"""Structured logger construction."""
from __future__ import annotations

from .factory import JSONFormatter, StructuredLogger, TextFormatter, new_logger, parse_level

__all__ = ["JSONFormatter", "StructuredLogger", "TextFormatter", "new_logger", "parse_level"]
