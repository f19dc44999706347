"""
Helper utilities for picksift.

Provides common functions used across the front-ends:
- XDG config/data directory resolution
- Settings loading (TOML merged over defaults)
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import toml
from loguru import logger

APP_NAME = "picksift"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "general": {
        "prefix_depth": 3,
        "match_mode": "fuzzy",
    },
    "frecency": {
        "half_life_days": 3.0,
        "weight": 100.0,
    },
    "dmenu": {
        "delimiter": " ",
        "match_nth": [],
        "with_nth": [],
        "accept_nth": [],
    },
    "history": {
        "path": "",
    },
}


def config_dir() -> Path:
    """Return $XDG_CONFIG_HOME/picksift (falls back to ~/.config)."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_NAME


def data_dir() -> Path:
    """Return $XDG_DATA_HOME/picksift (falls back to ~/.local/share)."""
    base = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(base) / APP_NAME


def default_history_path() -> Path:
    """Location of the history database when settings don't override it."""
    return data_dir() / "history.db"


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings from a TOML file.

    Args:
        path: Settings file. Defaults to config_dir() / "config.toml".

    Returns:
        Dictionary containing settings with defaults applied

    Example settings file:
        [general]
        prefix_depth = 2
        match_mode = "fuzzy"

        [dmenu]
        delimiter = ":"
        match_nth = [2]
    """
    defaults = copy.deepcopy(DEFAULT_SETTINGS)
    settings_path = Path(path) if path else config_dir() / "config.toml"

    if not settings_path.exists():
        logger.debug(f"Settings file not found at {settings_path}, using defaults")
        return defaults

    try:
        loaded = toml.load(settings_path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}")
        return defaults

    return _deep_merge(defaults, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
