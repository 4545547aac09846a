"""Tests for settings.json handling."""

import json

import pytest

from taxcalc.sdk import config


class TestConfigDir:

    def test_env_var_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TAX_CALC_CONFIG_PATH", str(tmp_path / "custom"))

        assert config.get_config_dir() == tmp_path / "custom"

    def test_xdg_fallback(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TAX_CALC_CONFIG_PATH", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert config.get_config_dir() == tmp_path / "tax-calc"


class TestSettings:

    def test_missing_settings_is_empty(self, isolated_config):
        assert config.load_settings() == {}
        assert config.get_setting("brackets") is None
        assert config.get_setting("default_output_format", "text") == "text"

    def test_set_and_get(self, isolated_config):
        path = config.set_setting("default_output_format", "json")

        assert path == isolated_config / "settings.json"
        assert json.loads(path.read_text()) == {"default_output_format": "json"}
        assert config.get_setting("default_output_format") == "json"

    def test_clear(self, write_settings):
        write_settings({"brackets": "/tmp/x.yaml", "default_output_format": "csv"})

        assert config.clear_setting("brackets") is True
        assert config.clear_setting("brackets") is False
        assert config.load_settings() == {"default_output_format": "csv"}

    def test_save_creates_directory(self, tmp_path, monkeypatch):
        config_dir = tmp_path / "not" / "yet"
        monkeypatch.setenv("TAX_CALC_CONFIG_PATH", str(config_dir))

        config.save_settings({"a": 1})

        assert (config_dir / "settings.json").exists()

    def test_unknown_key_rejected(self, isolated_config):
        with pytest.raises(ValueError, match="unknown setting: bracket"):
            config.set_setting("bracket", "/tmp/x.yaml")

        assert not (isolated_config / "settings.json").exists()

    def test_invalid_output_format_rejected(self, isolated_config):
        with pytest.raises(ValueError, match="invalid output format"):
            config.set_setting("default_output_format", "xml")


class TestDefaultOutputFormat:

    def test_unset_is_text(self, isolated_config):
        assert config.get_default_output_format() == "text"

    def test_configured_format(self, write_settings):
        write_settings({"default_output_format": "csv"})

        assert config.get_default_output_format() == "csv"

    def test_format_not_allowed_falls_back_to_text(self, write_settings):
        write_settings({"default_output_format": "csv"})

        assert config.get_default_output_format(("text", "json")) == "text"
