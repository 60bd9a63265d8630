"""Tests for configuration loading and settings resolution."""

import os
import tempfile

import pytest
import yaml

from openai_shim.config_loader import _substitute_env_vars, load_config
from openai_shim.settings import (
    DEFAULT_BACKEND_URL,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    ShimSettings,
    load_settings,
    settings_from_config,
)

SETTINGS_ENV_VARS = (
    "OPENAI_SHIM_HOST",
    "OPENAI_SHIM_PORT",
    "OPENAI_SHIM_BACKEND_URL",
    "OPENAI_SHIM_TIMEOUT",
    "OPENAI_SHIM_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clear_settings_env(monkeypatch):
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    """Tests for loading configuration from YAML files."""

    def test_loads_simple_config(self, tmp_path):
        """Test loading a simple configuration."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            yaml.safe_dump({"backend": {"base_url": "http://test.local"}}), encoding="utf-8"
        )

        result = load_config(str(config_path))

        assert result["backend"]["base_url"] == "http://test.local"

    def test_raises_error_for_missing_config(self):
        """Test that error is raised for missing config file."""
        with pytest.raises(RuntimeError, match="Config file not found"):
            load_config("/nonexistent/path/config.yaml")

    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        """Test that OPENAI_SHIM_CONFIG selects the config file."""
        config_path = tmp_path / "other.yaml"
        config_path.write_text("server:\n  port: 9123\n", encoding="utf-8")
        monkeypatch.setenv("OPENAI_SHIM_CONFIG", str(config_path))

        assert load_config()["server"]["port"] == 9123

    def test_empty_file_is_empty_config(self, tmp_path):
        """Test that an empty YAML file yields an empty mapping."""
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("", encoding="utf-8")

        assert load_config(str(config_path)) == {}

    def test_substitutes_from_env_file(self, tmp_path):
        """Test that values from a sibling .env file are substituted."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("backend:\n  base_url: ${SHIM_TEST_BACKEND}\n", encoding="utf-8")
        (tmp_path / ".env").write_text("SHIM_TEST_BACKEND=http://from-env-file\n", encoding="utf-8")

        result = load_config(str(config_path))

        assert result["backend"]["base_url"] == "http://from-env-file"
        assert "SHIM_TEST_BACKEND" not in os.environ

    def test_substitution_can_be_disabled(self, tmp_path):
        """Test that substitute_env=False leaves placeholders alone."""
        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".yaml", delete=False, dir=tmp_path
        ) as f:
            yaml.safe_dump({"key": "${SOME_VAR}"}, f)

        assert load_config(f.name, substitute_env=False)["key"] == "${SOME_VAR}"


class TestSubstituteEnvVars:
    """Tests for environment variable substitution."""

    def test_braced_and_simple_forms(self, monkeypatch):
        """Test that both ${VAR} and $VAR are substituted."""
        monkeypatch.setenv("SHIM_HOST_PART", "backend")

        result = _substitute_env_vars(
            {"a": "http://${SHIM_HOST_PART}:1", "b": ["$SHIM_HOST_PART"]}
        )

        assert result == {"a": "http://backend:1", "b": ["backend"]}

    def test_env_file_values_win(self, monkeypatch):
        """Test that .env values take priority over the process environment."""
        monkeypatch.setenv("SHIM_PRIORITY", "process")
        assert _substitute_env_vars("$SHIM_PRIORITY", {"SHIM_PRIORITY": "file"}) == "file"

    def test_unset_variable_keeps_placeholder(self, monkeypatch):
        """Test that unset variables are left as literal placeholders."""
        monkeypatch.delenv("SHIM_DEFINITELY_UNSET", raising=False)
        assert _substitute_env_vars("${SHIM_DEFINITELY_UNSET}") == "${SHIM_DEFINITELY_UNSET}"

    def test_non_string_values_untouched(self):
        """Test that numbers and booleans pass through."""
        assert _substitute_env_vars({"port": 8000, "debug": True}) == {"port": 8000, "debug": True}


class TestSettings:
    """Tests for resolving ShimSettings."""

    def test_defaults_for_empty_config(self):
        """Test that an empty config yields default settings."""
        settings = settings_from_config({})
        assert settings == ShimSettings()
        assert settings.chat_url == f"{DEFAULT_BACKEND_URL}/api/chat"

    def test_reads_config_sections(self):
        """Test that server, backend and logging sections are read."""
        settings = settings_from_config(
            {
                "server": {"host": "0.0.0.0", "port": "9000"},
                "backend": {
                    "base_url": "http://gpu-box:11434/",
                    "chat_path": "api/chat",
                    "timeout_seconds": 12.5,
                },
                "logging": {"level": "debug"},
            }
        )

        assert settings.host == "0.0.0.0"
        assert settings.port == 9000
        assert settings.chat_url == "http://gpu-box:11434/api/chat"
        assert settings.timeout_seconds == 12.5
        assert settings.log_level == "DEBUG"

    def test_zero_timeout_disables_timeout(self):
        """Test that a non-positive timeout becomes None."""
        assert settings_from_config({"backend": {"timeout_seconds": 0}}).timeout_seconds is None

    def test_invalid_values_fall_back_to_defaults(self):
        """Test that unparseable numbers are ignored."""
        settings = settings_from_config(
            {"server": {"port": "eighty"}, "backend": {"timeout_seconds": "soon"}}
        )
        assert settings.port == DEFAULT_PORT
        assert settings.timeout_seconds == DEFAULT_TIMEOUT

    def test_environment_overrides(self, monkeypatch):
        """Test that environment variables override the config file."""
        monkeypatch.setenv("OPENAI_SHIM_HOST", "10.0.0.1")
        monkeypatch.setenv("OPENAI_SHIM_PORT", "8100")
        monkeypatch.setenv("OPENAI_SHIM_BACKEND_URL", "http://override:1")
        monkeypatch.setenv("OPENAI_SHIM_TIMEOUT", "5")
        monkeypatch.setenv("OPENAI_SHIM_LOG_LEVEL", "warning")

        settings = settings_from_config({"server": {"host": "127.0.0.1", "port": 8000}})

        assert settings == ShimSettings(
            host="10.0.0.1",
            port=8100,
            backend_url="http://override:1",
            timeout_seconds=5.0,
            log_level="WARNING",
        )

    def test_load_settings_missing_file_uses_defaults(self):
        """Test that a missing config file is not fatal for settings."""
        assert load_settings("/nonexistent/config.yaml") == ShimSettings()

    def test_bundled_default_config(self):
        """Test that the shipped config file resolves to the defaults."""
        assert load_settings("configs/config_default.yaml") == ShimSettings()
