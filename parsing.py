"""Parse/validate contract for the calculator's text fields.

Stakes and odds are kept as the raw text the user typed.  This module is the
parsed view of that text: it never raises on bad input, it answers "no value"
(``None``) instead.
"""

from __future__ import annotations

import math
import re
from typing import Optional

from config import DISPLAY_DECIMALS, MIN_USABLE_ODDS, decimal_separator

# Digits with at most one separator; a trailing or leading separator is allowed
# so half-typed values like "12." or ",5" still parse.
_NUMBER_RE = re.compile(r"^(?:\d+(?:[.,]\d*)?|[.,]\d+)$")


def parse_number(text: Optional[str], separator: Optional[str] = None) -> Optional[float]:
    """Return the non-negative value of ``text`` or ``None`` if absent/unparsable.

    The period is always accepted; a comma only when it is the active
    decimal separator.
    """
    if text is None:
        return None
    raw = str(text).strip()
    if not raw or not _NUMBER_RE.match(raw):
        return None
    sep = separator or decimal_separator()
    if "," in raw:
        if sep != ",":
            return None
        raw = raw.replace(",", ".")
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_odds(text: Optional[str], separator: Optional[str] = None) -> Optional[float]:
    """Return usable decimal odds (> 1.0) or ``None``."""
    value = parse_number(text, separator)
    if value is None or value <= MIN_USABLE_ODDS:
        return None
    return value


def parse_stake(text: Optional[str], separator: Optional[str] = None) -> Optional[float]:
    """Return a stake that can drive a calculation (> 0) or ``None``."""
    value = parse_number(text, separator)
    if value is None or value <= 0:
        return None
    return value


def is_valid_number(text: Optional[str], separator: Optional[str] = None) -> bool:
    """True for empty text or a non-negative decimal number."""
    if text is None or not str(text).strip():
        return True
    return parse_number(text, separator) is not None


def is_valid_odds(text: Optional[str], separator: Optional[str] = None) -> bool:
    """True when ``text`` is a number strictly greater than 1.0."""
    return parse_odds(text, separator) is not None


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

def _format_fixed(value: float, separator: Optional[str]) -> str:
    rounded = round(value, DISPLAY_DECIMALS) + 0.0  # folds -0.0 into 0.0
    text = f"{rounded:.{DISPLAY_DECIMALS}f}"
    sep = separator or decimal_separator()
    if sep != ".":
        text = text.replace(".", sep)
    return text


def format_amount(value: float, separator: Optional[str] = None) -> str:
    """Format a stake or income for display, e.g. ``41.86``."""
    return _format_fixed(value, separator)


def format_percent(value: float, separator: Optional[str] = None) -> str:
    """Format a profit percentage for display (no ``%`` suffix), e.g. ``4.65``."""
    return _format_fixed(value, separator)
