"""Unit tests for config file loading and the merge engine."""
import json
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, List

import pytest
import yaml

from nconf.config.config import BugsnagConfig, RootConfig, default_logging_config, default_root_config
from nconf.config.loader import load, merge_document, read_config_file, read_env_file
from nconf.core.exceptions import DecodeError, FileReadError

CONFIG_VALUES = {
    "log": {
        "level": "debug",
        "fields": {"something": 1},
    },
    "bugsnag": {
        "api_key": "secrets",
        "project_package": "package",
    },
    "metrics": {
        "enabled": True,
        "port": 8125,
        "tags": {"env": "prod"},
    },
    "tracing": {
        "enabled": True,
        "port": "8125",
        "enable_debug": True,
    },
    "featureflag": {
        "key": "magicalkey",
        "request_timeout": "10s",
        "enabled": True,
    },
}


@dataclass
class ServiceConfig:
    name: str = "service"
    workers: int = 2
    hosts: List[str] = field(default_factory=list)
    limits: Dict[str, int] = field(default_factory=dict)


@dataclass
class AliasedConfig:
    api_key: str = field(default="", metadata={"key": "apiKey"})


class TestReadConfigFile:
    """Tests for read_config_file."""

    def test_empty_path(self):
        assert read_config_file("") is None
        assert read_config_file(None) is None

    def test_missing_file(self, tmp_path):
        assert read_config_file(tmp_path / "missing.yaml") is None

    def test_empty_file(self, write_config):
        # Arrange
        path = write_config("empty.json")

        # Assert
        assert read_config_file(path) is None

    def test_comment_only_yaml(self, write_config):
        # Arrange
        path = write_config("comments.yaml", "# nothing here\n")

        # Assert
        assert read_config_file(path) is None

    def test_unsupported_extension(self, write_config):
        # Arrange
        path = write_config("config.toml", "[log]\nlevel = 'debug'\n")

        # Act / Assert
        with pytest.raises(DecodeError) as exc_info:
            read_config_file(path)
        assert exc_info.value.path == str(path)
        assert ".toml" in str(exc_info.value)

    def test_empty_file_with_unsupported_extension(self, write_config):
        # Arrange
        path = write_config("config.toml")

        # Assert
        assert read_config_file(path) is None

    def test_malformed_json(self, write_config):
        # Arrange
        path = write_config("broken.json", "{not json")

        # Act / Assert
        with pytest.raises(DecodeError) as exc_info:
            read_config_file(path)
        assert str(path) in str(exc_info.value)

    def test_malformed_yaml(self, write_config):
        # Arrange
        path = write_config("broken.yml", "log: [unclosed\n")

        # Act / Assert
        with pytest.raises(DecodeError):
            read_config_file(path)

    def test_top_level_must_be_mapping(self, write_config):
        # Arrange
        path = write_config("list.json", "[1, 2]")

        # Act / Assert
        with pytest.raises(DecodeError):
            read_config_file(path)

    def test_unreadable_file(self, tmp_path):
        # Arrange
        path = tmp_path / "config.json"
        path.mkdir()

        # Act / Assert
        with pytest.raises(FileReadError) as exc_info:
            read_config_file(path)
        assert exc_info.value.path == str(path)

    def test_env_file_is_not_decoded(self, write_config):
        # Arrange
        path = write_config("settings.env", "PF_OTHER=10\n")

        # Assert
        assert read_config_file(path) is None


class TestReadEnvFile:
    """Tests for read_env_file."""

    def test_reads_values(self, write_config):
        # Arrange
        path = write_config("app.env", "PF_OTHER=10\nPF_OVERRIDDEN=not-that\n# comment\n")

        # Act
        values = read_env_file(path)

        # Assert
        assert values == {"PF_OTHER": "10", "PF_OVERRIDDEN": "not-that"}

    def test_ignores_other_files(self, write_config):
        # Arrange
        path = write_config("app.yaml", "PF_OTHER: 10\n")

        # Assert
        assert read_env_file(path) == {}
        assert read_env_file("") == {}


class TestLoad:
    """Tests for loading a file onto pre-populated objects."""

    def test_empty_file_keeps_defaults(self, write_config):
        # Arrange
        path = write_config("empty.yaml")
        cfg = RootConfig(log=default_logging_config())

        # Act
        load(path, cfg)

        # Assert
        assert cfg.log == default_logging_config()
        assert cfg.log.quote_empty_fields is True
        assert cfg.bugsnag is None
        assert cfg == default_root_config()

    def test_present_fields_override_and_absent_fields_survive(self, write_config):
        # Arrange
        path = write_config(
            "config.yaml",
            "log:\n  level: debug\n  fields:\n    string: value\n    int: 4\n",
        )
        cfg = RootConfig(log=default_logging_config())

        # Act
        load(path, cfg)

        # Assert
        assert cfg.log.quote_empty_fields is True
        assert cfg.log.level == "debug"
        assert cfg.log.fields == {"string": "value", "int": 4}

    @pytest.mark.parametrize("ext,encode", [
        ("json", json.dumps),
        ("yaml", yaml.safe_dump),
        ("yml", yaml.safe_dump),
    ])
    def test_all_sections(self, write_config, ext, encode):
        # Arrange
        path = write_config(f"test-config.{ext}", encode(CONFIG_VALUES))
        cfg = default_root_config()

        # Act
        load(path, cfg)

        # Assert
        assert cfg.log.level == "debug"
        assert cfg.log.quote_empty_fields is True
        assert cfg.log.file == ""
        assert cfg.log.disable_colors is False
        assert cfg.log.ts_format == ""
        assert cfg.log.fields == {"something": 1}
        assert cfg.log.use_new_logger is False

        assert cfg.bugsnag == BugsnagConfig(api_key="secrets", project_package="package")

        assert cfg.metrics.enabled is True
        assert cfg.metrics.host == ""
        assert cfg.metrics.port == 8125
        assert cfg.metrics.tags == {"env": "prod"}

        assert cfg.tracing.enabled is True
        assert cfg.tracing.host == ""
        assert cfg.tracing.port == "8125"
        assert cfg.tracing.tags == {}
        assert cfg.tracing.enable_debug is True

        assert cfg.featureflag.key == "magicalkey"
        assert cfg.featureflag.request_timeout == timedelta(seconds=10)
        assert cfg.featureflag.enabled is True
        assert cfg.featureflag.disable_events is False
        assert cfg.featureflag.relay_host == ""

    def test_json_and_yaml_agree(self, write_config):
        # Arrange
        json_path = write_config("config.json", json.dumps(CONFIG_VALUES))
        yaml_path = write_config("config.yaml", yaml.safe_dump(CONFIG_VALUES))
        from_json, from_yaml = default_root_config(), default_root_config()

        # Act
        load(json_path, from_json)
        load(yaml_path, from_yaml)

        # Assert
        assert from_json == from_yaml

    def test_maps_are_replaced_whole(self, write_config):
        # Arrange
        path = write_config("config.json", json.dumps({"metrics": {"tags": {"team": "core"}}}))
        cfg = default_root_config()
        cfg.metrics.tags = {"env": "prod"}

        # Act
        load(path, cfg)

        # Assert
        assert cfg.metrics.tags == {"team": "core"}

    def test_custom_config_shares_the_file(self, write_config):
        # Arrange
        path = write_config(
            "config.yaml",
            "log:\n  level: warn\nname: api\nhosts: [a, b]\nlimits:\n  rps: 10\nunknown: ignored\n",
        )
        root, custom = default_root_config(), ServiceConfig()

        # Act
        load(path, root, custom)

        # Assert
        assert root.log.level == "warn"
        assert custom.name == "api"
        assert custom.workers == 2
        assert custom.hosts == ["a", "b"]
        assert custom.limits == {"rps": 10}

    def test_none_targets_are_skipped(self, write_config):
        # Arrange
        path = write_config("config.json", '{"log": {"level": "error"}}')
        root = default_root_config()

        # Act
        load(path, root, None)

        # Assert
        assert root.log.level == "error"

    def test_keys_match_case_insensitively(self, write_config):
        # Arrange
        path = write_config("config.json", '{"LOG": {"Level": "trace"}}')
        root = default_root_config()

        # Act
        load(path, root)

        # Assert
        assert root.log.level == "trace"

    def test_field_key_alias(self, write_config):
        # Arrange
        path = write_config("config.json", '{"apiKey": "abc"}')
        cfg = AliasedConfig()

        # Act
        load(path, cfg)

        # Assert
        assert cfg.api_key == "abc"

    def test_wrong_type_names_field(self, write_config):
        # Arrange
        path = write_config("config.json", '{"metrics": {"port": "not-a-port"}}')

        # Act / Assert
        with pytest.raises(DecodeError) as exc_info:
            load(path, default_root_config())
        assert "metrics.port" in str(exc_info.value)

    def test_invalid_duration(self, write_config):
        # Arrange
        path = write_config("config.yaml", "featureflag:\n  request_timeout: soon\n")

        # Act / Assert
        with pytest.raises(DecodeError) as exc_info:
            load(path, default_root_config())
        assert "featureflag.request_timeout" in str(exc_info.value)


class TestMergeDocument:
    """Tests for merge_document on in-memory documents."""

    def test_null_clears_optional_section(self):
        # Arrange
        cfg = default_root_config()
        cfg.bugsnag = BugsnagConfig(api_key="key")

        # Act
        merge_document(cfg, {"bugsnag": None})

        # Assert
        assert cfg.bugsnag is None

    def test_null_keeps_required_value(self):
        # Arrange
        cfg = default_root_config()

        # Act
        merge_document(cfg, {"log": {"level": None}})

        # Assert
        assert cfg.log.level == "info"

    def test_existing_section_is_updated_in_place(self):
        # Arrange
        cfg = default_root_config()
        section = cfg.metrics

        # Act
        merge_document(cfg, {"metrics": {"host": "statsd"}})

        # Assert
        assert cfg.metrics is section
        assert section.host == "statsd"
        assert section.port == 8125

    def test_numeric_duration_is_seconds(self):
        # Arrange
        cfg = default_root_config()

        # Act
        merge_document(cfg, {"featureflag": {"request_timeout": 2.5}})

        # Assert
        assert cfg.featureflag.request_timeout == timedelta(seconds=2.5)

    def test_section_must_be_mapping(self):
        with pytest.raises(DecodeError) as exc_info:
            merge_document(default_root_config(), {"log": "debug"}, source="inline")
        assert exc_info.value.path == "inline"
