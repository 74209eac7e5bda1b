"""Structured logger construction from the logging section.

Loggers are loguru sinks rendering logfmt-style text or JSON lines. Every
handle owns its own sink and only receives records emitted through it, so
building a logger never reconfigures the process-wide loguru logger.
"""
from __future__ import annotations

import json
import re
import sys
import uuid
from typing import Any, Dict, Optional, TextIO

from loguru import logger

from nconf.config.config import LoggingConfig
from nconf.core.exceptions import LoggerConstructionError

_HANDLE_KEY = "_nconf_handle"

_LEVELS = {
    "trace": "TRACE",
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
    "fatal": "CRITICAL",
    "panic": "CRITICAL",
}

_SAFE_VALUE = re.compile(r"^[A-Za-z0-9\-._/@^+]+$")
_MARKUP_TAG = re.compile(r"</?[^<>\s]*>")


def parse_level(name: str) -> str:
    """Map a level name to the loguru level.

    Raises:
        LoggerConstructionError: If the name is not a known level
    """
    level = _LEVELS.get(name.strip().lower())
    if level is None:
        raise LoggerConstructionError(f"unknown log level {name!r}")
    return level


def _escape(text: str) -> str:
    # loguru treats the rendered line as a format template with color markup
    text = text.replace("{", "{{").replace("}", "}}")
    return _MARKUP_TAG.sub(lambda m: "\\" + m.group(0), text)


def _fields(record: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in record["extra"].items() if k != _HANDLE_KEY}


class TextFormatter:
    """Render records as ``time=... level=... msg=... key=value`` lines.

    Attributes:
        disable_colors: Never color the level
        quote_empty_fields: Render empty values as ``""`` instead of nothing
        timestamp_format: strftime pattern, empty for ISO-8601
    """

    def __init__(
        self,
        disable_colors: bool = False,
        quote_empty_fields: bool = True,
        timestamp_format: str = "",
    ):
        self.disable_colors = disable_colors
        self.quote_empty_fields = quote_empty_fields
        self.timestamp_format = timestamp_format

    def render(self, record: Dict[str, Any]) -> str:
        """Render a loguru record to a single line without markup."""
        parts = [
            f"time={self._quote(self._timestamp(record))}",
            f"level={record['level'].name.lower()}",
            f"msg={self._quote(record['message'])}",
        ]
        fields = _fields(record)
        for key in sorted(fields):
            parts.append(f"{key}={self._quote(self._stringify(fields[key]))}")
        return " ".join(parts)

    def __call__(self, record: Dict[str, Any]) -> str:
        line = _escape(self.render(record))
        if not self.disable_colors:
            level = f"level={record['level'].name.lower()}"
            line = line.replace(level, f"<level>{level}</level>", 1)
        return line + "\n{exception}"

    def _timestamp(self, record: Dict[str, Any]) -> str:
        if self.timestamp_format:
            return record["time"].strftime(self.timestamp_format)
        return record["time"].isoformat(timespec="seconds")

    def _quote(self, value: str) -> str:
        if not value:
            return '""' if self.quote_empty_fields else ""
        if _SAFE_VALUE.match(value):
            return value
        return json.dumps(value, ensure_ascii=False)

    @staticmethod
    def _stringify(value: Any) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if value is None:
            return "<nil>"
        return str(value)


class JSONFormatter:
    """Render records as one JSON object per line."""

    def __init__(self, timestamp_format: str = ""):
        self.timestamp_format = timestamp_format

    def render(self, record: Dict[str, Any]) -> str:
        if self.timestamp_format:
            timestamp = record["time"].strftime(self.timestamp_format)
        else:
            timestamp = record["time"].isoformat(timespec="seconds")
        payload = dict(_fields(record))
        payload.update({
            "time": timestamp,
            "level": record["level"].name.lower(),
            "msg": record["message"],
        })
        return json.dumps(payload, default=str, ensure_ascii=False)

    def __call__(self, record: Dict[str, Any]) -> str:
        return _escape(self.render(record)) + "\n{exception}"


class StructuredLogger:
    """Handle to a configured logger.

    Logging methods (``debug``, ``info``, ``exception``, ...) are delegated to
    the bound loguru logger.

    Attributes:
        level: loguru level name of the sink
        formatter: Formatter rendering each record
        handler_id: loguru handler id of the sink
        owns_sink: False for handles derived with ``with_fields``
    """

    def __init__(
        self,
        bound_logger,
        level: str,
        formatter,
        handler_id: int,
        stream: Optional[TextIO] = None,
        owns_sink: bool = True,
    ):
        self._logger = bound_logger
        self.level = level
        self.formatter = formatter
        self.handler_id = handler_id
        self.owns_sink = owns_sink
        self._stream = stream

    def __getattr__(self, name: str):
        return getattr(self._logger, name)

    def with_fields(self, **fields: Any) -> "StructuredLogger":
        """Return a handle writing to the same sink with extra fields bound.

        Closing the derived handle leaves the sink attached.
        """
        return StructuredLogger(
            self._logger.bind(**fields),
            self.level,
            self.formatter,
            self.handler_id,
            owns_sink=False,
        )

    def close(self) -> None:
        """Detach the sink and close the log file if this handle opened one."""
        if not self.owns_sink:
            return
        try:
            logger.remove(self.handler_id)
        except ValueError:
            pass
        if self._stream is not None:
            self._stream.close()
            self._stream = None


def new_logger(cfg: LoggingConfig) -> StructuredLogger:
    """Construct a logger from the logging section.

    Args:
        cfg: Resolved logging configuration

    Returns:
        StructuredLogger writing to ``cfg.file`` or stdout

    Raises:
        LoggerConstructionError: If the level is unknown or the file cannot be opened
    """
    level = parse_level(cfg.level)
    if cfg.use_new_logger:
        formatter = JSONFormatter(cfg.ts_format)
    else:
        formatter = TextFormatter(
            disable_colors=cfg.disable_colors,
            quote_empty_fields=cfg.quote_empty_fields,
            timestamp_format=cfg.ts_format,
        )

    stream = None
    sink: TextIO = sys.stdout
    if cfg.file:
        try:
            stream = open(cfg.file, "a", encoding="utf-8")
        except OSError as e:
            raise LoggerConstructionError(f"unable to open log file {cfg.file}: {e}") from e
        sink = stream

    token = uuid.uuid4().hex
    colorize = False if (stream is not None or cfg.disable_colors or cfg.use_new_logger) else None
    handler_id = logger.add(
        sink,
        level=level,
        format=formatter,
        colorize=colorize,
        filter=lambda record: record["extra"].get(_HANDLE_KEY) == token,
    )
    bound = logger.bind(**{_HANDLE_KEY: token}).bind(**cfg.fields)
    return StructuredLogger(bound, level, formatter, handler_id, stream)
