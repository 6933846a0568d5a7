"""Integration tests for configuration loading with layered precedence.

Tests the real load_config() function with actual YAML files, environment
variables, .env files and CLI overrides to verify precedence:
defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from relayplay.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "relayplay-test",
        "environment": "test",
        "proxy": {"base_url": "https://yaml-proxy.test/"},
        "http": {"timeout_seconds": 15.0, "user_agent": "TestAgent/1.0"},
        "playback": {"attempt_timeout_seconds": 12.0},
        "logging": {"level": "DEBUG", "format": "console"},
        "cache": {"dir": str(tmp_path / "cache")},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "relayplay"
        assert config.environment == "dev"
        assert config.proxy_base_url == ""
        assert config.attempt_timeout_seconds == 20.0
        assert config.log_format == "console"

    def test_prod_derives_json(self) -> None:
        assert load_config(cli_overrides={"environment": "prod"}).log_format == "json"


class TestYamlOverrides:
    def test_yaml_overrides_defaults(self, yaml_config: Path, tmp_path: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "relayplay-test"
        assert config.proxy_base_url == "https://yaml-proxy.test/"
        assert config.http_user_agent == "TestAgent/1.0"
        assert config.attempt_timeout_seconds == 12.0
        assert config.cache_dir == tmp_path / "cache"

    def test_partial_yaml_keeps_section_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.yaml"
        path.write_text(yaml.dump({"playback": {"seek_grace_seconds": 1.5}}))

        config = load_config(config_path=path)

        assert config.seek_grace_seconds == 1.5
        assert config.seek_tolerance_seconds == 2.0
        assert config.attempt_timeout_seconds == 20.0

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(config_path=path).app_name == "relayplay"

    def test_non_mapping_yaml_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path=path)

    def test_missing_yaml_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")


class TestEnvOverrides:
    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RELAYPLAY_PROXY_BASE_URL", "https://env-proxy.test")
        monkeypatch.setenv("RELAYPLAY_ATTEMPT_TIMEOUT_SECONDS", "30")

        config = load_config(config_path=yaml_config)

        assert config.proxy_base_url == "https://env-proxy.test"
        assert config.attempt_timeout_seconds == 30.0
        assert config.http_user_agent == "TestAgent/1.0"

    def test_dotenv_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("RELAYPLAY_LOG_LEVEL", raising=False)
        dotenv = tmp_path / ".env"
        dotenv.write_text("RELAYPLAY_LOG_LEVEL=WARNING\n")

        try:
            config = load_config(dotenv_path=dotenv)
        finally:
            os.environ.pop("RELAYPLAY_LOG_LEVEL", None)

        assert config.log_level == "WARNING"
        assert "RELAYPLAY_LOG_LEVEL" not in os.environ

    def test_missing_dotenv_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / "missing.env")


class TestCliOverrides:
    def test_cli_beats_env_and_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RELAYPLAY_PROXY_BASE_URL", "https://env-proxy.test")

        config = load_config(
            config_path=yaml_config,
            cli_overrides={"proxy_base_url": "https://cli-proxy.test"},
        )

        assert config.proxy_base_url == "https://cli-proxy.test"

    def test_sectioned_cli_overrides(self, yaml_config: Path) -> None:
        config = load_config(
            config_path=yaml_config,
            cli_overrides={"playback": {"attempt_timeout_seconds": 3.0}},
        )
        assert config.attempt_timeout_seconds == 3.0
