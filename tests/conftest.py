"""Shared fixtures: an explicit sample schedule and an isolated config dir."""

import json

import pytest
import yaml

from taxcalc.sdk import BracketSchedule


# Sample progressive schedule used across tests:
#   0 - 150,000          0%
#   150,001 - 500,000    10%
#   500,001 - 1,000,000  15%
#   1,000,001 - 2,000,000 20%
#   2,000,001 and up     35%
SAMPLE_BRACKETS = [
    {"up_to": "150000", "rate": "0"},
    {"up_to": "500000", "rate": "0.10"},
    {"up_to": "1000000", "rate": "0.15"},
    {"up_to": "2000000", "rate": "0.20"},
    {"rate": "0.35"},
]


@pytest.fixture
def sample_schedule() -> BracketSchedule:
    return BracketSchedule.model_validate({"name": "sample", "brackets": SAMPLE_BRACKETS})


@pytest.fixture
def schedule_file(tmp_path):
    """The sample schedule written out as YAML."""
    path = tmp_path / "sample.yaml"
    path.write_text(yaml.dump({"name": "sample", "brackets": SAMPLE_BRACKETS}))
    return path


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the SDK at an empty config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("TAX_CALC_CONFIG_PATH", str(config_dir))
    return config_dir


@pytest.fixture
def write_settings(isolated_config):
    """Write settings.json into the isolated config directory."""
    def _write(settings: dict):
        (isolated_config / "settings.json").write_text(json.dumps(settings))
        return isolated_config / "settings.json"
    return _write
