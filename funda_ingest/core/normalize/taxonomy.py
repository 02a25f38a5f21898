"""
Property-type classifier (free-text Dutch/English labels → PropertyType).
"""

from __future__ import annotations

from funda_ingest.schemas.labels import PROPERTY_TYPE_RULES, PropertyType


def classify(primary_label: str | None = None, secondary_label: str | None = None) -> PropertyType:
    """
    Map a locale type label (e.g. 'Eengezinswoning, tussenwoning') plus a
    generic fallback label (e.g. 'House') to a canonical PropertyType.

    Rows in PROPERTY_TYPE_RULES are tested in order and the first contained
    term wins; unmapped text yields PropertyType.property.
    """
    primary = primary_label if isinstance(primary_label, str) else ""
    secondary = secondary_label if isinstance(secondary_label, str) else ""
    combined = f"{primary} {secondary}".strip().lower()
    if not combined:
        return PropertyType.property

    for terms, ptype in PROPERTY_TYPE_RULES:
        if any(term in combined for term in terms):
            return ptype
    return PropertyType.property


def is_new_construction(label: str | None) -> bool | None:
    """True/False when a locale label is present, None otherwise."""
    if not label:
        return None
    return "nieuwbouw" in label.lower()
