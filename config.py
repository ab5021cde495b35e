"""Configuration constants for the surebet calculator."""

from __future__ import annotations

import os

# -----------------------------------------------------------------------------
# Leg counts
# -----------------------------------------------------------------------------

MIN_LEG_COUNT = 2
MAX_LEG_COUNT = 10


def default_leg_count() -> int:
    """Leg count for a new session (``SUREBET_DEFAULT_LEG_COUNT``, clamped to 2..10)."""
    raw = os.getenv("SUREBET_DEFAULT_LEG_COUNT", "").strip()
    try:
        value = int(float(raw)) if raw else MIN_LEG_COUNT
    except ValueError:
        return MIN_LEG_COUNT
    return max(MIN_LEG_COUNT, min(value, MAX_LEG_COUNT))

# -----------------------------------------------------------------------------
# Number parsing / presentation
# -----------------------------------------------------------------------------

SUPPORTED_DECIMAL_SEPARATORS = {".", ","}
DEFAULT_DECIMAL_SEPARATOR = "."

MIN_USABLE_ODDS = 1.0
DISPLAY_DECIMALS = 2

DEFAULT_INCOME = "0"
DEFAULT_PROFIT_PERCENTAGE = "0"

# -----------------------------------------------------------------------------
# Server
# -----------------------------------------------------------------------------

DEFAULT_PORTS = [5000, 5050, 8000]
DEFAULT_LOG_LEVEL = "INFO"


def decimal_separator() -> str:
    """Return the active decimal separator (``SUREBET_DECIMAL_SEPARATOR``)."""
    raw = os.getenv("SUREBET_DECIMAL_SEPARATOR", "").strip()
    if raw in SUPPORTED_DECIMAL_SEPARATORS:
        return raw
    return DEFAULT_DECIMAL_SEPARATOR


def log_level() -> str:
    raw = os.getenv("SUREBET_LOG_LEVEL", "").strip().upper()
    return raw or DEFAULT_LOG_LEVEL
