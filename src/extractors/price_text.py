# src/extractors/price_text.py

"""Currency-shaped text parsing shared by the price strategies."""

import math
import re

from src.config.settings import Settings

# Optional $, digits with optional thousands separators, optional cents.
# The lookbehinds keep negative amounts and fragments of longer numbers
# from matching.
PRICE_RE = re.compile(
    r"(?<![\d.,\-])(?<!-\$)\$?\s?(\d{1,3}(?:,\d{3})+|\d+)(?:\.(\d{2}))?(?!\d)"
)

# "$" followed by digits, or any amount with a two-digit fraction
_CURRENCY_HINT_RE = re.compile(
    r"(?<!-)\$\s?\d|(?<![\d.,\-])\d[\d,]*\.\d{2}(?!\d)"
)

_CLEAN_PRICE_RE = re.compile(
    r"^\$?\s?(\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{2})?$"
)


def _to_float(match: re.Match[str]) -> float:
    whole = match.group(1).replace(",", "")
    cents = match.group(2) or "00"
    return float(f"{whole}.{cents}")


def has_currency_hint(text: str | None) -> bool:
    """Return True if *text* visibly carries a price."""
    return bool(text) and _CURRENCY_HINT_RE.search(text or "") is not None


def parse_price(text: str | None) -> float | None:
    """Return the first currency-shaped amount in *text*, if any."""
    if not text:
        return None
    match = PRICE_RE.search(text)
    return _to_float(match) if match else None


def is_clean_price(text: str | None) -> bool:
    """True when the stripped text is exactly one currency string."""
    return bool(text) and _CLEAN_PRICE_RE.match((text or "").strip()) is not None


def normalize_price(value: float) -> float:
    return round(float(value), 2)


def within_bounds(
    value: float | None, ceiling: float = Settings.PRICE_CEILING,
) -> bool:
    """Sanity bounds: strictly positive, at most *ceiling* (inclusive)."""
    if value is None or not math.isfinite(value):
        return False
    return 0 < value <= ceiling
