from __future__ import annotations

from enum import Enum

# =========================
# Canonical label enums
# =========================


class PropertyType(str, Enum):
    apartment = "apartment"
    house = "house"
    villa = "villa"
    bungalow = "bungalow"
    studio = "studio"
    room = "room"
    land = "land"
    new_construction = "new-construction"
    farm = "farm"
    property = "property"  # generic fallback for unmapped labels


class TransactionType(str, Enum):
    sale = "sale"
    rent = "rent"
    unknown = "unknown"


class ListingStatus(str, Enum):
    active = "active"
    sold = "sold"
    rented = "rented"


# =========================
# Phrase maps
# =========================

# Ordered (terms, type) rows; the first row with a term contained in the label wins.
# Dwelling terms sit ahead of garden/land terms so "woning met tuin" stays a house.
PROPERTY_TYPE_RULES: tuple[tuple[tuple[str, ...], PropertyType], ...] = (
    (("appartement", "apartment", "bovenwoning", "benedenwoning", "portiekflat", "maisonnette", "penthouse"), PropertyType.apartment),
    (("woning", "eengezinswoning", "huis", "house"), PropertyType.house),
    (("villa",), PropertyType.villa),
    (("bungalow",), PropertyType.bungalow),
    (("studio",), PropertyType.studio),
    (("kamer", "room"), PropertyType.room),
    (("tuin", "grond", "garden"), PropertyType.land),
    (("nieuwbouw",), PropertyType.new_construction),
    (("boerderij", "farm"), PropertyType.farm),
)

# OfferingType values seen on the wire (lower-cased) → transaction kind
OFFERING_TYPE_MAP: dict[str, TransactionType] = {
    "sale": TransactionType.sale,
    "buy": TransactionType.sale,
    "koop": TransactionType.sale,
    "rent": TransactionType.rent,
    "huur": TransactionType.rent,
}

# Price text markers for monthly (rental) prices
PER_MONTH_MARKERS: tuple[str, ...] = ("per maand", "/maand", "/mnd", "p.m.")


def transaction_type_from_offering(offering: str | None) -> TransactionType:
    """Map a free-form OfferingType to sale/rent/unknown."""
    if not offering:
        return TransactionType.unknown
    return OFFERING_TYPE_MAP.get(offering.strip().lower(), TransactionType.unknown)


__all__ = [
    "PropertyType",
    "TransactionType",
    "ListingStatus",
    "PROPERTY_TYPE_RULES",
    "OFFERING_TYPE_MAP",
    "PER_MONTH_MARKERS",
    "transaction_type_from_offering",
]
