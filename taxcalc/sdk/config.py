"""Configuration management for Tax Calc.

All configuration is one small settings.json of machine-local preferences.
The keys tax-calc reads are listed in SETTINGS_KEYS; each is optional and
has a built-in fallback:

   - brackets: schedule YAML consulted by taxes.brackets.resolve_schedule_path
     when no explicit --brackets/path is given (fallback: bundled default)
   - default_output_format: format the CLI uses when --format is omitted
     (fallback: text)

Config directory resolution:
1. TAX_CALC_CONFIG_PATH environment variable (if set)
2. $XDG_CONFIG_HOME/tax-calc/ (default ~/.config/tax-calc/)
"""

import json
import os
from pathlib import Path
from typing import Any, Optional, Sequence


APP_NAME = "tax-calc"
SETTINGS_FILENAME = "settings.json"
CONFIG_PATH_ENV = "TAX_CALC_CONFIG_PATH"

OUTPUT_FORMATS = ("text", "json", "csv")

SETTINGS_KEYS = {
    "brackets": "path to a bracket schedule YAML",
    "default_output_format": "text, json or csv",
}


class ConfigNotFoundError(Exception):
    """A settings value points at a file that does not exist."""
    pass


def get_config_dir() -> Path:
    """Directory holding settings.json (not created until something is saved)."""
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Read settings.json; a missing file means no preferences are set."""
    settings_file = get_settings_path()
    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Overwrite settings.json with `settings`, creating the config dir if needed."""
    settings_file = get_settings_path()
    settings_file.parent.mkdir(parents=True, exist_ok=True)

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    return load_settings().get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Store one preference.

    Raises:
        ValueError: If key is not one of SETTINGS_KEYS, or an output format
            is not one of OUTPUT_FORMATS
    """
    if key not in SETTINGS_KEYS:
        raise ValueError(f"unknown setting: {key} (known: {', '.join(SETTINGS_KEYS)})")
    if key == "default_output_format" and value not in OUTPUT_FORMATS:
        raise ValueError(f"invalid output format: {value} (choose from {', '.join(OUTPUT_FORMATS)})")

    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def clear_setting(key: str) -> bool:
    """Remove a preference so its fallback applies. Returns True if it was set."""
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True


def get_default_output_format(allowed: Sequence[str] = OUTPUT_FORMATS) -> str:
    """Configured default_output_format, or text if unset or not in `allowed`.

    `calculate` has no csv output, so a csv default falls back to text there.
    """
    fmt: Optional[str] = get_setting("default_output_format")
    return fmt if fmt in allowed else "text"
