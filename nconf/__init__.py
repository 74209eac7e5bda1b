"""Layered configuration loading for command-line programs.

Merges typed defaults, an optional JSON/YAML config file and prefixed
environment variables into one configuration object, then builds a
structured logger from its logging section.

Example:
    args = RootArgs()
    args.add_arguments(parser)
    parser.parse_args(namespace=args)
    config, log = args.setup(app_config, "MYAPP", "config.yaml")
"""
from __future__ import annotations

from loguru import logger as _loguru_logger

from nconf.args import RootArgs
from nconf.config import (
    BugsnagConfig,
    FeatureFlagConfig,
    LoggingConfig,
    MetricsConfig,
    RootConfig,
    TracingConfig,
    apply_environment,
    default_logging_config,
    default_root_config,
    load,
)
from nconf.core.exceptions import (
    ConfigurationError,
    DecodeError,
    FileReadError,
    LoggerConstructionError,
    NconfError,
    TypeMismatchError,
)
from nconf.logger import StructuredLogger, new_logger

# Library messages stay silent until the application calls logger.enable("nconf").
_loguru_logger.disable("nconf")

__version__ = "0.1.0"

__all__ = [
    "RootArgs",
    "RootConfig",
    "LoggingConfig",
    "BugsnagConfig",
    "MetricsConfig",
    "TracingConfig",
    "FeatureFlagConfig",
    "default_logging_config",
    "default_root_config",
    "load",
    "apply_environment",
    "new_logger",
    "StructuredLogger",
    "NconfError",
    "ConfigurationError",
    "FileReadError",
    "DecodeError",
    "TypeMismatchError",
    "LoggerConstructionError",
]
