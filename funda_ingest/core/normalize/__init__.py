from __future__ import annotations

from .numbers import parse_area, parse_count, parse_decimal, parse_int, parse_price_text, parse_year, price_unit
from .record import (
    build_extension,
    build_ingestion_payload,
    derive_status,
    extract_features,
    facts_to_canonical,
    normalize_listing,
    parse_listing_facts,
)
from .taxonomy import classify

__all__ = [
    "classify",
    "normalize_listing",
    "parse_listing_facts",
    "facts_to_canonical",
    "build_extension",
    "build_ingestion_payload",
    "derive_status",
    "extract_features",
    "parse_area",
    "parse_count",
    "parse_decimal",
    "parse_int",
    "parse_price_text",
    "parse_year",
    "price_unit",
]
