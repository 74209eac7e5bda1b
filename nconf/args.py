"""Invocation arguments and the setup sequence.

``RootArgs`` carries the two command-line parameters shared by every
program (config file and environment prefix) and runs the startup
sequence: defaults → config file → environment → logger.
"""
from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from loguru import logger

from nconf.config.config import RootConfig, default_root_config
from nconf.config.env import apply_environment
from nconf.config.loader import load, read_env_file
from nconf.logger.factory import StructuredLogger, new_logger


@dataclass
class RootArgs:
    """Invocation-time configuration parameters.

    Attributes:
        prefix: Environment variable prefix, case-insensitive
        config_file: Path to a JSON, YAML or dotenv config file
    """
    prefix: str = ""
    config_file: str = ""

    def add_arguments(self, parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
        """Register the ``--config`` and ``--prefix`` flags.

        Parse with ``parser.parse_args(argv, namespace=args)`` to bind the
        values straight into this instance.
        """
        parser.add_argument(
            "--config", "-c",
            dest="config_file",
            default=self.config_file,
            help="Path to a JSON, YAML or .env configuration file",
        )
        parser.add_argument(
            "--prefix",
            dest="prefix",
            default=self.prefix,
            help="Prefix of environment variables overriding the configuration",
        )
        return parser

    def setup(
        self,
        custom_config: Any = None,
        default_env_prefix: str = "",
        default_config_file: str = "",
    ) -> Tuple[RootConfig, StructuredLogger]:
        """Load configuration from all sources and build the logger.

        Orchestrates the sequence:
        1. Build the default root configuration
        2. Fall back to the default config file and prefix when unset
        3. Load the config file into the root and custom configurations
        4. Overlay environment variables onto both
        5. Construct the logger from the logging section

        Args:
            custom_config: Caller's configuration object, updated in place
            default_env_prefix: Prefix used when ``prefix`` is unset
            default_config_file: Config file used when ``config_file`` is unset

        Returns:
            Tuple of (RootConfig, StructuredLogger)

        Raises:
            ConfigurationError: If the file or environment cannot be applied
            LoggerConstructionError: If the logging section is invalid
        """
        root = self.load_default_config(custom_config, default_config_file)
        prefix = self.resolved_prefix(default_env_prefix)

        environ: Dict[str, str] = dict(read_env_file(self.resolved_config_file(default_config_file)))
        environ.update(os.environ)

        apply_environment(prefix, root, environ)
        apply_environment(prefix, custom_config, environ)

        log = new_logger(root.log)
        logger.debug("Configuration loaded with prefix {!r}", prefix)
        return root, log

    def load_default_config(
        self,
        custom_config: Any = None,
        default_config_file: str = "",
    ) -> RootConfig:
        """Build the default root configuration and apply the config file.

        Environment variables are not consulted.
        """
        root = default_root_config()
        load(self.resolved_config_file(default_config_file), root, custom_config)
        return root

    def resolved_prefix(self, default_env_prefix: str = "") -> str:
        """Prefix in effect, upper-cased."""
        return (self.prefix or default_env_prefix or "").upper()

    def resolved_config_file(self, default_config_file: str = "") -> Optional[str]:
        """Config file in effect, or None when neither is set."""
        return self.config_file or default_config_file or None
