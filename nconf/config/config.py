"""Typed configuration sections and their defaults.

The root configuration is assembled from three sources with the following
precedence:
1. Default values (lowest priority)
2. JSON or YAML configuration file
3. Environment variables (highest priority)

Every section is a mutable dataclass so that later sources can be merged
onto an instance that earlier sources already populated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, Optional


@dataclass
class LoggingConfig:
    """Logging configuration.

    Attributes:
        level: Log level name (trace, debug, info, warn, error, fatal, panic)
        file: Output file path, empty for stdout
        disable_colors: Disable ANSI colors in text output
        quote_empty_fields: Render empty field values as ``""``
        ts_format: strftime pattern for timestamps, empty for ISO-8601
        fields: Static key/value pairs attached to every log line
        use_new_logger: Emit JSON lines instead of text
    """
    level: str = "info"
    file: str = ""
    disable_colors: bool = False
    quote_empty_fields: bool = True
    ts_format: str = ""
    fields: Dict[str, Any] = field(default_factory=dict)
    use_new_logger: bool = False


@dataclass
class BugsnagConfig:
    """Error reporting configuration.

    Attributes:
        api_key: Project API key
        environment: Release stage reported with each event
        log_hook: Report error-level log lines
        project_package: Package considered "in project" for stack traces
    """
    api_key: str = ""
    environment: str = ""
    log_hook: bool = False
    project_package: str = ""


@dataclass
class MetricsConfig:
    """StatsD metrics configuration.

    Attributes:
        enabled: Enable metrics reporting
        host: Agent host, empty for the client default
        port: Agent port
        tags: Tags attached to every metric
    """
    enabled: bool = False
    host: str = ""
    port: int = 8125
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class TracingConfig:
    """Distributed tracing configuration.

    Attributes:
        enabled: Enable tracing
        host: Agent host, empty for the client default
        port: Agent port
        tags: Tags attached to every span
        enable_debug: Enable tracer debug output
    """
    enabled: bool = False
    host: str = ""
    port: str = "8126"
    tags: Dict[str, str] = field(default_factory=dict)
    enable_debug: bool = False


@dataclass
class FeatureFlagConfig:
    """Feature flag client configuration.

    Attributes:
        key: SDK key
        enabled: Enable the feature flag client
        request_timeout: Timeout for flag evaluation requests
        disable_events: Do not send analytics events
        relay_host: Relay proxy URL, empty to talk to the service directly
    """
    key: str = ""
    enabled: bool = False
    request_timeout: timedelta = field(default_factory=lambda: timedelta(seconds=5))
    disable_events: bool = False
    relay_host: str = ""


@dataclass
class RootConfig:
    """Complete standard configuration.

    Attributes:
        log: Logging settings
        bugsnag: Error reporting settings, None while not configured
        metrics: Metrics settings
        tracing: Tracing settings
        featureflag: Feature flag settings
    """
    log: LoggingConfig = field(default_factory=LoggingConfig)
    bugsnag: Optional[BugsnagConfig] = None
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    featureflag: FeatureFlagConfig = field(default_factory=FeatureFlagConfig)


def default_logging_config() -> LoggingConfig:
    """Get default logging configuration."""
    return LoggingConfig()


def default_root_config() -> RootConfig:
    """Get default root configuration.

    Returns a new instance on every call so callers may merge onto it freely.
    """
    return RootConfig(log=default_logging_config())


__all__ = [
    "LoggingConfig",
    "BugsnagConfig",
    "MetricsConfig",
    "TracingConfig",
    "FeatureFlagConfig",
    "RootConfig",
    "default_logging_config",
    "default_root_config",
]
