"""
Characteristic-section extractor (KenmerkSections → addressable values).

The listing API groups descriptive facts into sections ("bouw", "afmetingen",
"indeling", ...). Sections hold fields; fields may hold nested fields and
sections may hold child sections. Lookups address one value by
(section id, field id).

Rules:
  - First section with a matching id wins; later duplicates are ignored.
  - A section is flattened depth-first: each field before its nested fields,
    all of a section's fields before its child sections' fields.
  - First field with a matching id wins; its value is returned verbatim.
  - Empty or malformed input yields None, never an exception.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from funda_ingest.schemas.models import RawField, RawSection

SectionLike = RawSection | Mapping[str, Any]

# Semantic attribute → (section id, field id)
KENMERK_FIELDS: dict[str, tuple[str, str]] = {
    "price_per_sqm": ("overdracht", "overdracht-vraagprijsperm2"),
    "property_subtype": ("bouw", "bouw-soortobject"),
    "construction_type": ("bouw", "bouw-soortbouw"),
    "year_built": ("bouw", "bouw-bouwjaar"),
    "living_area": ("afmetingen", "afmetingen-gebruiksoppervlakten-wonen"),
    "plot_area": ("afmetingen", "afmetingen-gebruiksoppervlakten-tuin"),
    "rooms": ("indeling", "indeling-kamers"),
    "bedrooms": ("indeling", "indeling-slaapkamers"),
    "bathrooms": ("indeling", "indeling-badkamers"),
    "energy_label": ("energie", "energie-energielabel"),
    "parking_type": ("parkeergelegenheid", "parkeergelegenheid-soort"),
}


def _coerce_sections(sections: Iterable[SectionLike] | None) -> list[RawSection]:
    if not sections or isinstance(sections, (str, bytes, Mapping)):
        return []
    out: list[RawSection] = []
    try:
        items = list(sections)
    except TypeError:
        return []
    for item in items:
        if isinstance(item, RawSection):
            out.append(item)
        elif isinstance(item, Mapping):
            try:
                out.append(RawSection.model_validate(dict(item)))
            except ValidationError:
                continue
    return out


def _flatten_field_list(fields: list[RawField]) -> list[RawField]:
    out: list[RawField] = []
    stack: list[RawField] = list(reversed(fields))
    while stack:
        f = stack.pop()
        out.append(f)
        stack.extend(reversed(f.children))
    return out


def flatten_fields(section: RawSection) -> list[RawField]:
    """Depth-first flatten of one section and all of its descendants."""
    out = _flatten_field_list(section.fields)
    for child in section.sections:
        out.extend(flatten_fields(child))
    return out


def find_section(sections: Iterable[SectionLike] | None, section_id: str) -> RawSection | None:
    """First section whose id equals `section_id`, or None."""
    for s in _coerce_sections(sections):
        if s.section_id == section_id:
            return s
    return None


def resolve(sections: Iterable[SectionLike] | None, section_id: str, field_id: str) -> str | None:
    """
    Resolve (section_id, field_id) to the field's display value.

    Returns None when the section or field is missing or the value is empty.
    """
    section = find_section(sections, section_id)
    if section is None:
        return None
    for f in flatten_fields(section):
        if f.field_id == field_id:
            return f.value or None
    return None


def resolve_attribute(sections: Iterable[SectionLike] | None, attribute: str) -> str | None:
    """Resolve one of the named attributes in KENMERK_FIELDS."""
    key = KENMERK_FIELDS.get(attribute)
    if key is None:
        raise KeyError(f"unknown kenmerk attribute: {attribute!r}")
    return resolve(sections, *key)


def flatten_to_mapping(sections: Iterable[SectionLike] | None) -> dict[str, str]:
    """
    field_id → value for every identified field with a value, across all sections.
    Section order is precedence order; the first occurrence of a field id wins.
    """
    out: dict[str, str] = {}
    seen: set[str] = set()
    for s in _coerce_sections(sections):
        if s.section_id is not None:
            if s.section_id in seen:
                continue
            seen.add(s.section_id)
        for f in flatten_fields(s):
            if f.field_id and f.value and f.field_id not in out:
                out[f.field_id] = f.value
    return out


__all__ = [
    "KENMERK_FIELDS",
    "flatten_fields",
    "find_section",
    "resolve",
    "resolve_attribute",
    "flatten_to_mapping",
]
