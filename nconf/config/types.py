"""Type inspection and duration helpers shared by the merge engine and the overlay.

Configuration targets are dataclasses (or plain classes carrying type
annotations). Field names are resolved case-insensitively; a field may carry
an alias in its dataclass metadata:

    api_key: str = field(default="", metadata={"key": "apiKey", "env": "KEY"})

``key`` replaces the name used in config files and ``env`` replaces the
segment used in environment variable names.
"""
from __future__ import annotations

import dataclasses
import re
import typing
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, List, Tuple

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

# Microseconds per unit; timedelta cannot hold anything finer.
_DURATION_UNITS = {
    "ns": 0.001,
    "us": 1.0,
    "µs": 1.0,
    "μs": 1.0,
    "ms": 1_000.0,
    "s": 1_000_000.0,
    "m": 60_000_000.0,
    "h": 3_600_000_000.0,
}


def parse_duration(text: str) -> timedelta:
    """Parse a Go-style duration string such as ``"10s"`` or ``"1h15m30.5s"``.

    Raises:
        ValueError: If the text is not a valid duration
    """
    body = text.strip()
    sign = 1
    if body[:1] in ("+", "-"):
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {text!r}")

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(body):
        if match.start() != position:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position != len(body):
        raise ValueError(f"invalid duration {text!r}")
    return timedelta(microseconds=sign * total)


def format_duration(value: timedelta) -> str:
    """Render a timedelta the way Go prints durations (``1m30s``, ``250ms``)."""
    micros = (value.days * 86_400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros == 0:
        return "0s"
    if micros < 1_000:
        return f"{sign}{micros}µs"
    if micros < 1_000_000:
        millis = f"{micros / 1_000:.3f}".rstrip("0").rstrip(".")
        return f"{sign}{millis}ms"

    hours, rem = divmod(micros, 3_600_000_000)
    minutes, rem = divmod(rem, 60_000_000)
    seconds = f"{rem / 1_000_000:.6f}".rstrip("0").rstrip(".")
    text = f"{seconds}s"
    if hours or minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


@dataclass(frozen=True)
class FieldSpec:
    """A resolved configuration field.

    Attributes:
        name: Python attribute name
        type: Resolved annotation
        key: Name used in config files
        env: Segment used in environment variable names
    """
    name: str
    type: Any
    key: str
    env: str


def config_fields(cls: type) -> List[FieldSpec]:
    """List the configurable fields of a dataclass or annotated class."""
    hints = typing.get_type_hints(cls)
    if dataclasses.is_dataclass(cls):
        specs = []
        for f in dataclasses.fields(cls):
            specs.append(FieldSpec(
                name=f.name,
                type=hints.get(f.name, Any),
                key=f.metadata.get("key", f.name),
                env=f.metadata.get("env", f.name),
            ))
        return specs

    return [
        FieldSpec(name=name, type=tp, key=name, env=name)
        for name, tp in hints.items()
        if not name.startswith("_") and typing.get_origin(tp) is not typing.ClassVar
    ]


def unwrap_optional(tp: Any) -> Tuple[Any, bool]:
    """Strip ``Optional[...]`` from an annotation.

    Returns:
        Tuple of (inner type, whether the annotation was optional)
    """
    if typing.get_origin(tp) is typing.Union:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0], True
    return tp, False


def is_section(tp: Any) -> bool:
    """Whether the annotation names a nested configuration section."""
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def type_name(tp: Any) -> str:
    """Readable name of an annotation for error messages."""
    if tp is timedelta:
        return "duration"
    if isinstance(tp, type):
        return tp.__name__
    return str(tp).replace("typing.", "")
