"""Configuration package.

Provides layered configuration loading with the precedence
defaults < config file < environment variables.

Main components:
- config.py: Typed configuration sections and their defaults
- loader.py: JSON/YAML file loading and the merge engine
- env.py: Environment variable overlay
- types.py: Field inspection and duration helpers
"""
from __future__ import annotations

from .config import (
    BugsnagConfig,
    FeatureFlagConfig,
    LoggingConfig,
    MetricsConfig,
    RootConfig,
    TracingConfig,
    default_logging_config,
    default_root_config,
)
from .env import apply_environment
from .loader import load, merge_document, read_config_file, read_env_file
from .types import format_duration, parse_duration

__all__ = [
    "BugsnagConfig",
    "FeatureFlagConfig",
    "LoggingConfig",
    "MetricsConfig",
    "RootConfig",
    "TracingConfig",
    "default_logging_config",
    "default_root_config",
    "apply_environment",
    "load",
    "merge_document",
    "read_config_file",
    "read_env_file",
    "format_duration",
    "parse_duration",
]
