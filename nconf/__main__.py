"""Print the resolved configuration.

Usage:
    python -m nconf --config config.yaml --prefix MYAPP --format yaml
"""
from __future__ import annotations

import argparse
import dataclasses
import json
import sys
from datetime import timedelta
from typing import Any, List, Optional

import yaml

from nconf.args import RootArgs
from nconf.config.types import format_duration
from nconf.core.exceptions import NconfError


def to_plain(value: Any) -> Any:
    """Convert a configuration object to JSON/YAML friendly values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    if isinstance(value, timedelta):
        return format_duration(value)
    return value


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the config dump command."""
    args = RootArgs()
    parser = args.add_arguments(
        argparse.ArgumentParser(prog="nconf", description="Print the resolved configuration")
    )
    parser.add_argument(
        "--format",
        choices=["json", "yaml"],
        default="json",
        help="Output format",
    )
    known = parser.parse_args(argv, namespace=args)

    try:
        config, log = args.setup()
    except NconfError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        plain = to_plain(config)
        if known.format == "yaml":
            sys.stdout.write(yaml.safe_dump(plain, default_flow_style=False, sort_keys=False))
        else:
            sys.stdout.write(json.dumps(plain, indent=2) + "\n")
    finally:
        log.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
