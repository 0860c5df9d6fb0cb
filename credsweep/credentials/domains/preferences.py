"""Persistent operator preferences for credsweep.

Stored as JSON under the XDG config directory:
~/.config/credsweep/preferences.json

Only ``config_path`` is used today; it points `credsweep revoke` at a
config file outside the default location.
"""
import json
from pathlib import Path
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

PREFERENCES_DIR = Path.home() / ".config" / "credsweep"
PREFERENCES_FILE = PREFERENCES_DIR / "preferences.json"


def _read_all() -> Dict[str, Any]:
    """Return stored preferences; a missing or corrupt file reads as empty."""
    if not PREFERENCES_FILE.exists():
        return {}

    try:
        with open(PREFERENCES_FILE, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Ignoring unreadable preferences file {PREFERENCES_FILE}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Ignoring preferences file {PREFERENCES_FILE}: expected a JSON object")
        return {}
    return data


def _write_all(preferences: Dict[str, Any]) -> None:
    PREFERENCES_DIR.mkdir(parents=True, exist_ok=True)
    with open(PREFERENCES_FILE, 'w') as f:
        json.dump(preferences, f, indent=2)


def get_preference(key: str) -> Optional[str]:
    """Return the stored value for key, or None."""
    return _read_all().get(key)


def set_preference(key: str, value: str) -> None:
    """Store value under key, replacing any previous value."""
    preferences = _read_all()
    preferences[key] = value
    _write_all(preferences)
    logger.info(f"Preference '{key}' set to: {value}")


def clear_preference(key: str) -> None:
    """Remove key if present. Clearing an unset key is a no-op."""
    preferences = _read_all()
    if key not in preferences:
        logger.debug(f"Preference '{key}' not set, nothing to clear")
        return

    del preferences[key]
    _write_all(preferences)
    logger.info(f"Preference '{key}' cleared")
