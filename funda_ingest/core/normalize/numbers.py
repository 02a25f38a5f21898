"""
Numeric coercion for locale-formatted display values.

All helpers are total: unparsable or non-finite input returns None, never raises.
Dutch formatting is the default reading: '.' groups thousands and ',' marks
decimals ('€ 450.000 k.k.' → 450000.0, '€ 5.250,50' → 5250.5).
"""

from __future__ import annotations

import math
import re
from typing import Any

from funda_ingest.schemas.labels import PER_MONTH_MARKERS
from funda_ingest.schemas.models import PriceUnit

# ---------- Regex tables ----------

_SPACES = "\u00a0\u2009\u202f "
_NUM_TOKEN_RE = re.compile(rf"\d+(?:[.,{_SPACES}]\d+)*")
_INT_RE = re.compile(r"\d+")
_YEAR_RE = re.compile(r"\b(1[4-9]\d{2}|20\d{2})\b")
_DUTCH_THOUSANDS_RE = re.compile(r"\d{1,3}\.\d{3}")


def _to_text(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        try:
            return str(value)
        except ValueError:
            return None
    return None


def _normalize_separators(token: str) -> str:
    t = re.sub(rf"[{_SPACES}]", "", token)
    if "," in t and "." in t:
        # the right-most mark is the decimal separator
        if t.rfind(",") > t.rfind("."):
            return t.replace(".", "").replace(",", ".")
        return t.replace(",", "")
    if "," in t:
        return t.replace(",", "") if t.count(",") > 1 else t.replace(",", ".")
    if "." in t and (t.count(".") > 1 or _DUTCH_THOUSANDS_RE.fullmatch(t)):
        return t.replace(".", "")
    return t


# ---------- Public API ----------


def parse_decimal(value: Any) -> float | None:
    """
    First number in a display value, as float.

    Currency symbols, unit suffixes and whitespace are ignored; thousands
    separators are dropped and a decimal comma becomes a decimal point.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            num = float(value)
        except OverflowError:
            return None
        return num if math.isfinite(num) else None
    text = _to_text(value)
    if not text:
        return None
    m = _NUM_TOKEN_RE.search(text)
    if not m:
        return None
    try:
        num = float(_normalize_separators(m.group(0)))
    except ValueError:
        return None
    # absurdly long digit runs overflow to inf
    return num if math.isfinite(num) else None


def parse_price_text(value: Any) -> float | None:
    """'€ 450.000 k.k.' → 450000.0 ; 'Prijs op aanvraag' → None."""
    return parse_decimal(value)


def parse_area(value: Any) -> int | None:
    """'120 m²' → 120 ; '1.250 m²' → 1250."""
    num = parse_decimal(value)
    if num is None or num < 0:
        return None
    return int(round(num))


def parse_int(value: Any) -> int | None:
    """First integer run: '5 kamers (4 slaapkamers)' → 5."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = _to_text(value)
    if not text:
        return None
    m = _INT_RE.search(text)
    if not m:
        return None
    try:
        return int(m.group(0))
    except ValueError:
        # beyond the interpreter's int-from-str digit limit
        return None


def parse_count(value: Any) -> int | None:
    """Grouped counters: '1.234' → 1234 ; '56' → 56."""
    num = parse_decimal(value)
    if num is None or num < 0:
        return None
    return int(num)


def parse_year(value: Any) -> int | None:
    """Four-digit construction year: '1930' → 1930 ; 'Na 2001' → 2001."""
    text = _to_text(value)
    if not text:
        return None
    m = _YEAR_RE.search(text)
    return int(m.group(1)) if m else None


def price_unit(value: Any) -> PriceUnit:
    """'€ 1.250 /mnd' → per_month ; anything else → total."""
    text = (_to_text(value) or "").lower()
    return "per_month" if any(marker in text for marker in PER_MONTH_MARKERS) else "total"


__all__ = [
    "parse_decimal",
    "parse_price_text",
    "parse_area",
    "parse_int",
    "parse_count",
    "parse_year",
    "price_unit",
]
