"""Configuration management for Withhold Check.

Configuration lives in one directory:

1. settings.json - Machine-specific settings
   - tolerance_pct, max_attempts, exclude_net_pay: reconciliation policy
   - headless, ws_endpoint, timeout_ms: browser options
   - host, port: HTTP server defaults
   - vocabulary: path to a custom vocabulary.yaml (optional)

2. vocabulary.yaml - Label variants per calculator (optional)
   - Overrides the packaged default when present

Config directory resolution:
1. WITHHOLD_CHECK_CONFIG_PATH environment variable (if set)
2. ~/.config/withhold-check/ (XDG_CONFIG_HOME fallback)
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from .errors import SettingsError
from .schemas import CheckSettings


APP_NAME = "withhold-check"
SETTINGS_FILENAME = "settings.json"
VOCABULARY_FILENAME = "vocabulary.yaml"
DEFAULT_VOCABULARY_PATH = Path(__file__).parent.parent / "data" / VOCABULARY_FILENAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. WITHHOLD_CHECK_CONFIG_PATH environment variable
    2. ~/.config/withhold-check/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    # 1. Check environment variable
    env_path = os.environ.get("WITHHOLD_CHECK_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    # 2. Fall back to XDG config path
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load raw settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)

    Raises:
        SettingsError: If the file is not valid JSON
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    try:
        with open(settings_file, "r") as f:
            return json.load(f) or {}
    except json.JSONDecodeError as e:
        raise SettingsError(f"Invalid JSON in {settings_file}: {e}")


def save_settings(settings: dict) -> Path:
    """Save settings to settings.json.

    Args:
        settings: Settings dictionary to save

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_check_settings() -> CheckSettings:
    """Load and validate settings.json, filling defaults for unset keys.

    Raises:
        SettingsError: If the file contains unknown keys or invalid values
    """
    raw = load_settings()
    try:
        return CheckSettings.model_validate(raw)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {get_settings_path()}:\n{e}")


def get_setting(key: str, default: Any = None) -> Any:
    """Get an effective setting value (explicit value or schema default).

    Args:
        key: Setting key (e.g., "tolerance_pct")
        default: Returned when the key is not a known setting

    Returns:
        Setting value or default
    """
    settings = get_check_settings()
    return getattr(settings, key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json after validating it.

    Args:
        key: Setting key
        value: Value to set (strings are coerced by the schema, e.g. "1.0")

    Returns:
        Path to the saved settings file

    Raises:
        SettingsError: If the key is unknown or the value is invalid
    """
    if key not in CheckSettings.model_fields:
        raise SettingsError(
            f"Unknown setting '{key}'. Known settings: {', '.join(CheckSettings.model_fields)}"
        )

    settings = load_settings()
    settings[key] = value
    try:
        validated = CheckSettings.model_validate(settings)
    except ValidationError as e:
        raise SettingsError(f"Invalid value for '{key}': {e}")

    # Store the coerced value so settings.json keeps proper JSON types
    settings[key] = getattr(validated, key)
    return save_settings(settings)


def unset_setting(key: str) -> bool:
    """Remove a setting from settings.json, reverting it to its default.

    Returns:
        True if the key was present
    """
    settings = load_settings()
    if key not in settings:
        return False
    del settings[key]
    save_settings(settings)
    return True


def get_vocabulary_path(explicit: Optional[Path] = None) -> Path:
    """Resolve which vocabulary.yaml to load.

    Resolution order:
    1. explicit path argument
    2. settings.json "vocabulary" key
    3. vocabulary.yaml in the config directory
    4. packaged default (withholdcheck/data/vocabulary.yaml)
    """
    if explicit:
        return Path(explicit).expanduser()

    custom = load_settings().get("vocabulary")
    if custom:
        return Path(custom).expanduser()

    user_path = get_config_dir() / VOCABULARY_FILENAME
    if user_path.exists():
        return user_path

    return DEFAULT_VOCABULARY_PATH
