"""Persistent application settings."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from autogenre.errors import SettingsError
from autogenre.models import AppSettings

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "settings.json"


def get_config_dir() -> Path:
    """
    Resolve the directory that holds settings.json.

    Order: $AUTOGENRE_CONFIG_DIR, $XDG_CONFIG_HOME/autogenre, ~/.config/autogenre.
    """
    explicit = os.getenv("AUTOGENRE_CONFIG_DIR")
    if explicit:
        return Path(explicit)
    xdg = os.getenv("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "autogenre"


def get_settings_path(path: Optional[str] = None) -> Path:
    if path:
        return Path(path)
    return get_config_dir() / SETTINGS_FILENAME


def load_settings(path: Optional[str] = None) -> AppSettings:
    """
    Load settings from disk.

    Args:
        path: Settings file. Defaults to settings.json in the config directory.

    Returns:
        AppSettings; defaults when the file does not exist yet.

    Raises:
        SettingsError: If the file exists but cannot be read or parsed.
    """
    settings_path = get_settings_path(path)

    if not settings_path.exists():
        logger.debug(f"No settings at {settings_path}, using defaults")
        return AppSettings()

    try:
        data = json.loads(settings_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SettingsError(f"Failed to read settings file: {e}") from e
    except json.JSONDecodeError as e:
        raise SettingsError(f"Failed to parse settings: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError("Failed to parse settings: expected a JSON object")

    return AppSettings.from_dict(data)


def save_settings(settings: AppSettings, path: Optional[str] = None) -> Path:
    """
    Write settings to disk, creating the config directory if needed.

    Returns:
        Path of the written file.
    """
    settings_path = get_settings_path(path)

    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        settings_path.write_text(
            json.dumps(settings.to_dict(), indent=2), encoding="utf-8"
        )
    except OSError as e:
        raise SettingsError(f"Failed to write settings file: {e}") from e

    logger.debug(f"Saved settings to {settings_path}")
    return settings_path
