"""Environment variable overlay.

Each configuration field maps to a variable named ``<PREFIX>_<FIELD>``;
nested sections extend the name with their own field name, so the logging
level of a program using the ``PF`` prefix is read from ``PF_LOG_LEVEL``.
Lookup walks the fields of the target rather than the environment, which
means unrelated variables sharing the prefix are simply never consulted.
"""
from __future__ import annotations

import os
import typing
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional

from loguru import logger

from nconf.config.types import (
    config_fields,
    is_section,
    parse_duration,
    type_name,
    unwrap_optional,
)
from nconf.core.exceptions import ConfigurationError, TypeMismatchError

_TRUE_VALUES = {"1", "t", "true", "y", "yes", "on"}
_FALSE_VALUES = {"0", "f", "false", "n", "no", "off"}


def apply_environment(
    prefix: str,
    target: Any,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Overlay environment variables onto a configuration object in place.

    Args:
        prefix: Variable name prefix, matched case-insensitively; may be empty
        target: Dataclass or annotated object to update
        environ: Variables to read, defaults to ``os.environ``

    Returns:
        Number of fields that were set

    Raises:
        TypeMismatchError: If a value cannot be converted to its field type
        ConfigurationError: If a targeted section cannot be built from defaults
    """
    if target is None:
        return 0
    source = os.environ if environ is None else environ
    lookup = {name.upper(): value for name, value in source.items()}
    return _apply(target, prefix.upper() if prefix else "", lookup)


def env_name(prefix: str, segment: str) -> str:
    """Join a prefix and a field segment into a variable name."""
    return f"{prefix}_{segment.upper()}" if prefix else segment.upper()


def convert_value(variable: str, raw: str, tp: Any) -> Any:
    """Convert a raw variable value to the field type ``tp``.

    Raises:
        TypeMismatchError: If the conversion fails
    """
    inner, _ = unwrap_optional(tp)
    try:
        return _convert(raw, inner)
    except ValueError as e:
        raise TypeMismatchError(variable, type_name(inner), raw) from e


def _apply(target: Any, prefix: str, lookup: Dict[str, str]) -> int:
    applied = 0
    for spec in config_fields(type(target)):
        name = env_name(prefix, spec.env)
        inner, _ = unwrap_optional(spec.type)

        if is_section(inner):
            current = getattr(target, spec.name, None)
            if isinstance(current, inner):
                applied += _apply(current, name, lookup)
                continue
            # absent sections are only created when something targets them
            if not any(key.startswith(name + "_") for key in lookup):
                continue
            section = _new_section(inner, name)
            count = _apply(section, name, lookup)
            if count:
                setattr(target, spec.name, section)
            applied += count
            continue

        if name not in lookup:
            continue
        setattr(target, spec.name, convert_value(name, lookup[name], spec.type))
        logger.debug("Applied environment variable {}", name)
        applied += 1
    return applied


def _new_section(cls: type, name: str) -> Any:
    try:
        return cls()
    except TypeError as e:
        raise ConfigurationError(f"cannot create section {cls.__name__} for {name}_*: {e}") from e


def _convert(raw: str, tp: Any) -> Any:
    if tp is Any or tp is str:
        return raw
    if tp is bool:
        value = raw.strip().lower()
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ValueError(f"invalid boolean {raw!r}")
    if tp is int:
        return int(raw.strip())
    if tp is float:
        return float(raw.strip())
    if tp is timedelta:
        return parse_duration(raw)

    origin = typing.get_origin(tp)
    if tp is dict or origin is dict:
        value_type = (typing.get_args(tp) or (Any, Any))[1]
        result = {}
        for pair in filter(None, (p.strip() for p in raw.split(","))):
            key, sep, value = pair.partition(":")
            if not sep:
                raise ValueError(f"invalid map item {pair!r}")
            result[key.strip()] = _convert(value.strip(), value_type)
        return result
    if tp is list or origin is list:
        item_type = (typing.get_args(tp) or (Any,))[0]
        return [_convert(item.strip(), item_type) for item in raw.split(",") if item.strip()]

    try:
        return tp(raw)
    except TypeError as e:
        raise ValueError(str(e)) from e
