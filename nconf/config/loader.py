"""Config file loading and the decode-onto-instance merge engine.

A config file is decoded once into a plain document and then applied onto
one or more pre-populated configuration objects. Only keys present in the
document overwrite fields; everything else keeps the value it had before,
which is what makes ``defaults < file`` work without a separate deep merge.
"""
from __future__ import annotations

import json
import typing
from datetime import timedelta
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import yaml
from dotenv import dotenv_values
from loguru import logger

from nconf.config.types import (
    config_fields,
    is_section,
    parse_duration,
    type_name,
    unwrap_optional,
)
from nconf.core.exceptions import DecodeError, FileReadError

PathLike = Union[str, Path]


def _decode_json(content: str) -> Any:
    return json.loads(content)


def _decode_yaml(content: str) -> Any:
    return yaml.safe_load(content)


_DECODERS: Dict[str, Callable[[str], Any]] = {
    ".json": _decode_json,
    ".yaml": _decode_yaml,
    ".yml": _decode_yaml,
}


def is_env_file(path: PathLike) -> bool:
    """Whether the path names a dotenv file (``.env`` or ``*.env``)."""
    return bool(path) and Path(path).name.lower().endswith(".env")


def read_config_file(path: Optional[PathLike]) -> Optional[Dict[str, Any]]:
    """Read and decode a JSON or YAML config file.

    Args:
        path: Path to the config file, may be empty

    Returns:
        Decoded top-level mapping, or None when there is nothing to apply
        (no path, missing file, empty file, or a dotenv file)

    Raises:
        FileReadError: If the file exists but cannot be read
        DecodeError: If the extension is unsupported or the content is invalid
    """
    if not path:
        return None
    file_path = Path(path)
    if not file_path.exists():
        logger.debug("Config file {} not found, using defaults", file_path)
        return None
    if is_env_file(file_path):
        # dotenv values are applied by the environment overlay
        return None

    try:
        content = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(str(file_path), str(e)) from e
    except OSError as e:
        raise FileReadError(str(file_path), str(e)) from e

    # an empty file is absent whatever its extension
    if not content.strip():
        logger.debug("Config file {} is empty, using defaults", file_path)
        return None

    decoder = _DECODERS.get(file_path.suffix.lower())
    if decoder is None:
        raise DecodeError(str(file_path), f"unsupported file extension {file_path.suffix!r}")

    try:
        document = decoder(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DecodeError(str(file_path), str(e)) from e

    if document is None:
        return None
    if not isinstance(document, dict):
        raise DecodeError(str(file_path), "top-level value must be a mapping")

    logger.debug("Loaded config file {} with sections {}", file_path, list(document))
    return document


def read_env_file(path: Optional[PathLike]) -> Dict[str, str]:
    """Read variables from a dotenv config file.

    Returns an empty mapping when the path is not a dotenv file or does not
    exist. Variables declared without a value are skipped.
    """
    if not path or not is_env_file(path):
        return {}
    file_path = Path(path)
    if not file_path.exists():
        return {}
    try:
        values = dotenv_values(file_path, encoding="utf-8")
    except OSError as e:
        raise FileReadError(str(file_path), str(e)) from e
    return {key: value for key, value in values.items() if value is not None}


def merge_document(target: Any, document: Dict[str, Any], source: str = "<document>") -> None:
    """Apply a decoded document onto a configuration object in place.

    Args:
        target: Dataclass or annotated object to update
        document: Decoded top-level mapping
        source: Name of the document used in error messages

    Raises:
        DecodeError: If a value does not fit its field type
    """
    try:
        _merge_object(target, document, "")
    except (TypeError, ValueError) as e:
        raise DecodeError(source, str(e)) from e


def load(config_file: Optional[PathLike], *targets: Any) -> None:
    """Load a config file onto each target.

    The file is read and decoded once; each target receives the same
    document, so standard sections and custom keys can share one file.
    ``None`` targets are skipped.
    """
    document = read_config_file(config_file)
    if document is None:
        return
    for target in targets:
        if target is not None:
            merge_document(target, document, str(config_file))


def _merge_object(target: Any, document: Dict[str, Any], prefix: str) -> None:
    specs = {spec.key.lower(): spec for spec in config_fields(type(target))}
    for key, value in document.items():
        spec = specs.get(str(key).lower())
        if spec is None:
            continue
        current = getattr(target, spec.name, None)
        setattr(target, spec.name, _coerce(current, value, spec.type, prefix + spec.key))


def _coerce(current: Any, value: Any, tp: Any, path: str) -> Any:
    inner, optional = unwrap_optional(tp)

    if value is None:
        return None if optional or inner is Any else current

    if is_section(inner):
        if not isinstance(value, dict):
            raise ValueError(f"{path}: expected a mapping, got {type(value).__name__}")
        section = current if isinstance(current, inner) else inner()
        _merge_object(section, value, path + ".")
        return section

    if inner is Any:
        return value

    origin = typing.get_origin(inner)
    if inner is dict or origin is dict:
        if not isinstance(value, dict):
            raise ValueError(f"{path}: expected a mapping, got {type(value).__name__}")
        value_type = (typing.get_args(inner) or (Any, Any))[1]
        # mappings are replaced whole, never merged key by key
        return {str(k): _coerce(None, v, value_type, f"{path}.{k}") for k, v in value.items()}

    if inner is list or origin is list:
        if not isinstance(value, list):
            raise ValueError(f"{path}: expected a list, got {type(value).__name__}")
        item_type = (typing.get_args(inner) or (Any,))[0]
        return [_coerce(None, item, item_type, f"{path}[{i}]") for i, item in enumerate(value)]

    if inner is timedelta:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return timedelta(seconds=value)
        if isinstance(value, str):
            try:
                return parse_duration(value)
            except ValueError as e:
                raise ValueError(f"{path}: {e}") from e
        raise ValueError(f"{path}: expected a duration, got {type(value).__name__}")

    if inner is bool:
        if isinstance(value, bool):
            return value
    elif inner is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
    elif inner is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif inner is str:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
    else:
        return value

    raise ValueError(f"{path}: expected {type_name(inner)}, got {type(value).__name__}")
