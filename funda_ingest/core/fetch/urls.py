"""
Listing identifiers from caller-supplied Funda URLs.

    https://www.funda.nl/detail/koop/amsterdam/huis-keizersgracht-1/43117443/ → '43117443'
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_TINY_ID_RE = re.compile(r"/(\d{8,9})/?(?:[?#].*)?$")


def extract_tiny_id(url: str) -> str | None:
    """Trailing 8–9 digit tiny id of a listing URL, or None."""
    if not url:
        return None
    m = _TINY_ID_RE.search(url.strip())
    return m.group(1) if m else None


def extract_tiny_ids(urls: Iterable[str]) -> list[str]:
    """Tiny ids in input order; URLs without one are skipped."""
    return [tid for tid in (extract_tiny_id(u) for u in urls) if tid]


__all__ = ["extract_tiny_id", "extract_tiny_ids"]
