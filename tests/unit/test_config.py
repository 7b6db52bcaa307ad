"""
Tests for configuration system.
"""

import os

import pytest

from recorder_studio.config import (
    CONFIG_ENV_VAR,
    ConfigLoader,
    ReplaySettings,
    RecorderSettings,
    Settings,
    get_settings,
    load_config,
    reset_settings,
)
from recorder_studio.exceptions import ConfigurationError


class TestSettings:
    """Test the Settings classes."""

    def test_default_settings(self):
        settings = Settings()

        assert settings.recorder.dialect == "playwright"
        assert settings.recorder.page_name == "page"
        assert settings.replay.settle_delay_ms == 300
        assert settings.replay.devtools_port == 9222
        assert settings.storage.path == "./recorder_studio.json"
        assert settings.browser.headless is False

    def test_merge_with_overrides(self):
        settings = Settings()
        new_settings = settings.merge_with({
            "replay": {"settle_delay_ms": 0},
            "recorder": {"dialect": "puppeteer"},
        })

        assert new_settings.replay.settle_delay_ms == 0
        assert new_settings.recorder.dialect == "puppeteer"
        # Other settings should remain default
        assert new_settings.replay.settle_timeout_ms == 500
        assert settings.replay.settle_delay_ms == 300

    def test_unknown_dialect_rejected(self):
        with pytest.raises(ValueError):
            RecorderSettings(dialect="cypress")

    def test_replay_settings_validation(self):
        assert ReplaySettings(settle_delay_ms=0).settle_delay_ms == 0

        with pytest.raises(ValueError):
            ReplaySettings(devtools_port=0)

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("RECORDER_STUDIO__RECORDER__DIALECT", "playwright-python")
        monkeypatch.setenv("RECORDER_STUDIO__REPLAY__SETTLE_DELAY_MS", "750")

        settings = Settings()

        assert settings.recorder.dialect == "playwright-python"
        assert settings.replay.settle_delay_ms == 750


class TestConfigLoader:
    """Test loading from files."""

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("recorder:\n  page_name: popup\nstorage:\n  path: /tmp/records.json\n")

        settings = load_config(config_path=path)

        assert settings.recorder.page_name == "popup"
        assert settings.storage.path == "/tmp/records.json"

    def test_default_file_in_working_directory(self, tmp_path):
        (tmp_path / "recorder_studio.yaml").write_text("debug: true\n")
        assert load_config().debug is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(config_path=path).recorder.dialect == "playwright"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("recorder: [unclosed\n")

        with pytest.raises(ConfigurationError):
            ConfigLoader(path).load()

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError):
            ConfigLoader(path).load()

    def test_overrides_win(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("replay:\n  settle_delay_ms: 100\n")

        settings = load_config(config_path=path, replay={"settle_delay_ms": 50})

        assert settings.replay.settle_delay_ms == 50

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(config_path=tmp_path / "absent.yaml")

    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "elsewhere.yml"
        path.write_text("recorder:\n  dialect: puppeteer\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert load_config().recorder.dialect == "puppeteer"

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("replay:\n  devtools_port: 0\n")

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(config_path=path)

    def test_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("RECORDER_STUDIO__RECORDER__PAGE_NAME", raising=False)
        env_file = tmp_path / "test.env"
        env_file.write_text("RECORDER_STUDIO__RECORDER__PAGE_NAME=tab\n")

        try:
            assert load_config(env_file=env_file).recorder.page_name == "tab"
        finally:
            os.environ.pop("RECORDER_STUDIO__RECORDER__PAGE_NAME", None)


class TestGlobalSettings:
    """Test the settings singleton."""

    def test_cached_until_reset(self):
        first = get_settings()
        assert get_settings() is first

        reset_settings()
        assert get_settings() is not first
