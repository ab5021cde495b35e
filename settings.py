"""Calculator settings file.

A JSON object whose known keys are checked and exported as ``SUREBET_*``
environment variables; everything else in the project reads ``os.environ``::

    {"decimal_separator": ",", "default_leg_count": 3, "log_level": "debug"}

Keys may also be given by their variable name (``SUREBET_DEFAULT_LEG_COUNT``).
Variables already present in the environment win over the file.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from config import MAX_LEG_COUNT, MIN_LEG_COUNT, SUPPORTED_DECIMAL_SEPARATORS

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = "settings.json"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _settings_path() -> Path:
    raw = os.getenv("SUREBET_CONFIG_PATH", "").strip() or DEFAULT_SETTINGS_PATH
    return Path(raw)


def read_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """Return the raw settings object, or ``{}`` when missing or unreadable."""
    path = path or _settings_path()
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring settings file %s: %s", path, exc)
        return {}
    if not isinstance(payload, dict):
        logger.warning("Ignoring settings file %s: top level is not an object", path)
        return {}
    return payload


# ---------------------------------------------------------------------------
# Per-key coercion; each returns the env value or None when invalid
# ---------------------------------------------------------------------------

def _separator(value: Any) -> Optional[str]:
    if isinstance(value, str) and value in SUPPORTED_DECIMAL_SEPARATORS:
        return value
    return None


def _leg_count(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and MIN_LEG_COUNT <= value <= MAX_LEG_COUNT:
        return str(value)
    return None


def _log_level(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip().upper() in _LOG_LEVELS:
        return value.strip().upper()
    return None


def _port(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and 0 < value < 65536:
        return str(value)
    return None


Coercer = Callable[[Any], Optional[str]]

SETTINGS: Dict[str, Tuple[str, Coercer]] = {
    "decimal_separator": ("SUREBET_DECIMAL_SEPARATOR", _separator),
    "default_leg_count": ("SUREBET_DEFAULT_LEG_COUNT", _leg_count),
    "log_level": ("SUREBET_LOG_LEVEL", _log_level),
    "port": ("SUREBET_PORT", _port),
}
_BY_ENV_NAME = {env_name: key for key, (env_name, _) in SETTINGS.items()}


def _lookup(key: Any) -> Optional[Tuple[str, Coercer]]:
    if not isinstance(key, str):
        return None
    name = _BY_ENV_NAME.get(key.strip(), key.strip().lower())
    return SETTINGS.get(name)


def apply_config_env(path: Optional[Path] = None) -> Dict[str, str]:
    """Export valid known settings into ``os.environ``; returns what was exported."""
    exported: Dict[str, str] = {}
    for key, value in read_settings(path).items():
        entry = _lookup(key)
        if entry is None:
            logger.warning("Unknown setting %r ignored", key)
            continue
        env_name, coerce = entry
        coerced: Optional[str] = coerce(value)
        if coerced is None:
            logger.warning("Invalid value %r for setting %r ignored", value, key)
            continue
        if env_name in os.environ:
            continue
        os.environ[env_name] = coerced
        exported[env_name] = coerced
    if exported:
        logger.debug("Settings exported: %s", ", ".join(sorted(exported)))
    return exported
