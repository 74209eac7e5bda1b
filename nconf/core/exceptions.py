"""Custom exception hierarchy for configuration loading."""
from __future__ import annotations


class NconfError(Exception):
    """Base exception for all nconf errors."""
    pass


class ConfigurationError(NconfError):
    """Raised when configuration is invalid or cannot be loaded."""
    pass


class FileReadError(ConfigurationError):
    """Raised when a config file exists but cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"unable to read config file {path}: {reason}")


class DecodeError(ConfigurationError):
    """Raised when a config file cannot be decoded onto its target."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"unable to decode config file {path}: {reason}")


class TypeMismatchError(ConfigurationError):
    """Raised when an environment variable does not convert to its field type."""

    def __init__(self, variable: str, expected: str, value: str):
        self.variable = variable
        self.expected = expected
        super().__init__(f"environment variable {variable}={value!r} is not a valid {expected}")


class LoggerConstructionError(NconfError):
    """Raised when the logging section cannot produce a logger."""
    pass
