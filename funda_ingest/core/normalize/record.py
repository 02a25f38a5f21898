"""
Deterministic listing normalizer (mobile-API listing detail → CanonicalRecord).

Two steps:
  1) parse_listing_facts(raw)  → ListingFacts   (portal-specific flat facts)
  2) facts_to_canonical(facts) → CanonicalRecord (universal fields + extension bag)

Total by construction: malformed or missing blocks degrade to absent values,
never to exceptions. No wall-clock values are stamped into the output, so the
same input always yields an equal record.
"""

from __future__ import annotations

from typing import Any

from funda_ingest.core.extract.sections import resolve_attribute
from funda_ingest.schemas.labels import ListingStatus, TransactionType, transaction_type_from_offering
from funda_ingest.schemas.models import (
    ApiPolicy,
    CanonicalAmenities,
    CanonicalDetails,
    CanonicalLocation,
    CanonicalRecord,
    Coordinates,
    ExtensionValue,
    IngestionPayload,
    ListingFacts,
    SourceRecord,
    coerce_source_record,
)

from .numbers import parse_area, parse_count, parse_decimal, parse_int, parse_price_text, parse_year, price_unit
from .taxonomy import classify, is_new_construction

RawRecord = SourceRecord | dict[str, Any]

# ---------- Helpers ----------


def _clean(text: str | None) -> str | None:
    if text is None:
        return None
    t = " ".join(text.split())
    return t or None


def _first(*values: str | None) -> str | None:
    for v in values:
        c = _clean(v)
        if c:
            return c
    return None


def _image_urls(rec: SourceRecord, pol: ApiPolicy) -> list[str]:
    gallery = rec.media.photos if rec.media else None
    if gallery is None:
        return []
    base = pol.image_base_url.rstrip("/")
    return [f"{base}/{item.id}_{pol.image_size}.jpg" for item in gallery.items if item.id]


def _price(rec: SourceRecord) -> float | None:
    numeric = rec.price.numeric_selling_price
    if numeric is not None and numeric > 0:
        return numeric
    return parse_price_text(rec.price.selling_price)


def derive_status(is_sold_or_rented: bool, transaction_type: TransactionType) -> ListingStatus:
    """Sold-or-rented flag + transaction kind → lifecycle status."""
    if not is_sold_or_rented:
        return ListingStatus.active
    return ListingStatus.rented if transaction_type == TransactionType.rent else ListingStatus.sold


# ---------- Public API ----------


def parse_listing_facts(raw: RawRecord | None, *, policy: ApiPolicy | None = None) -> ListingFacts:
    """
    Read the flat facts of one listing. Characteristic-section values take
    precedence over the FastView summary block, which only fills gaps.
    """
    rec = coerce_source_record(raw)
    pol = policy or ApiPolicy()
    sections = rec.kenmerk_sections
    fv = rec.fast_view
    ad = rec.address_details

    price_per_sqm_text = _clean(resolve_attribute(sections, "price_per_sqm"))
    price_per_sqm = parse_decimal(price_per_sqm_text)

    friendly = rec.urls.friendly_url
    url = friendly.full_url if friendly else None
    relative_url = friendly.relative_url if friendly else None
    listing_text = rec.listing_description
    description = listing_text.description if listing_text else None
    description_title = listing_text.title if listing_text else None
    brochure = rec.media.brochure.cdn_url if rec.media and rec.media.brochure else None

    return ListingFacts(
        tiny_id=_clean(rec.identifiers.tiny_id),
        global_id=rec.identifiers.global_id,
        url=_clean(url),
        relative_url=_clean(relative_url),
        title=_clean(ad.title),
        address=_clean(ad.title),
        house_number=_clean(ad.house_number),
        address_subtitle=_clean(ad.sub_title),
        postal_code=_clean(ad.post_code),
        city=_clean(ad.city),
        province=_clean(ad.province),
        country=_clean(ad.country) or "Netherlands",
        neighborhood=_clean(ad.neighborhood_name),
        latitude=rec.coordinates.latitude,
        longitude=rec.coordinates.longitude,
        price=_price(rec),
        price_text=_clean(rec.price.selling_price),
        price_unit=price_unit(rec.price.selling_price),
        is_auction=rec.price.is_auction,
        price_per_sqm_text=price_per_sqm_text,
        price_per_sqm=price_per_sqm if price_per_sqm and price_per_sqm > 0 else None,
        sqm=parse_area(_first(resolve_attribute(sections, "living_area"), fv.living_area)),
        plot_sqm=parse_area(_first(resolve_attribute(sections, "plot_area"), fv.plot_area)),
        rooms=parse_int(resolve_attribute(sections, "rooms")),
        bedrooms=parse_int(_first(resolve_attribute(sections, "bedrooms"), fv.number_of_bedrooms)),
        bathrooms=parse_int(resolve_attribute(sections, "bathrooms")),
        year_built=parse_year(resolve_attribute(sections, "year_built")),
        object_type=_clean(rec.object_type),
        dutch_property_type=_clean(resolve_attribute(sections, "property_subtype")),
        construction_type=_first(resolve_attribute(sections, "construction_type"), rec.construction_type),
        energy_label=_first(resolve_attribute(sections, "energy_label"), fv.energy_label),
        parking_type=_clean(resolve_attribute(sections, "parking_type")),
        description=(description or "").strip() or None,
        description_title=_clean(description_title),
        images=_image_urls(rec, pol),
        brochure_url=_clean(brochure),
        labels=[t for t in (_clean(lbl.text) for lbl in rec.labels) if t],
        views=parse_count(rec.object_insights.views),
        saves=parse_count(rec.object_insights.saves),
        transaction_type=transaction_type_from_offering(rec.offering_type),
        publication_date=_clean(rec.publication_date),
        is_sold_or_rented=rec.is_sold_or_rented,
    )


def extract_features(facts: ListingFacts) -> list[str]:
    """Human-readable feature strings for search/display."""
    features: list[str] = []
    if facts.energy_label:
        features.append(f"Energy Label: {facts.energy_label}")
    if facts.parking_type:
        features.append(f"Parking: {facts.parking_type}")
    if facts.construction_type:
        features.append(f"Construction: {facts.construction_type}")
    return features


def build_extension(facts: ListingFacts) -> dict[str, ExtensionValue]:
    """
    Market-specific facts without a universal slot. A key is present only when
    its source fact is; keys and their order are stable.
    """
    candidates: list[tuple[str, ExtensionValue | None]] = [
        ("dutch_property_type", facts.dutch_property_type),
        ("object_type", facts.object_type),
        ("construction_type", facts.construction_type),
        ("parking_type", facts.parking_type),
        ("province", facts.province),
        ("neighborhood", facts.neighborhood),
        ("house_number", facts.house_number),
        ("address_subtitle", facts.address_subtitle),
        ("energy_label", facts.energy_label),
        ("plot_sqm", facts.plot_sqm),
        ("price_per_sqm_original", facts.price_per_sqm_text),
        ("price_text", facts.price_text),
        ("price_unit", facts.price_unit if facts.price_unit != "total" else None),
        ("is_auction", True if facts.is_auction else None),
        ("views", facts.views),
        ("saves", facts.saves),
        ("publication_date", facts.publication_date),
        ("brochure_url", facts.brochure_url),
        ("relative_url", facts.relative_url),
        ("description_title", facts.description_title),
        ("labels", ", ".join(facts.labels) if facts.labels else None),
    ]
    return {k: v for k, v in candidates if v is not None}


def facts_to_canonical(facts: ListingFacts) -> CanonicalRecord:
    coords = None
    if facts.latitude is not None and facts.longitude is not None:
        coords = Coordinates(lat=facts.latitude, lon=facts.longitude)

    return CanonicalRecord(
        tiny_id=facts.tiny_id,
        global_id=facts.global_id,
        source_url=facts.url,
        title=facts.title,
        property_type=classify(facts.dutch_property_type, facts.object_type),
        transaction_type=facts.transaction_type,
        location=CanonicalLocation(
            address=facts.address,
            city=facts.city,
            region=facts.province,
            country=facts.country,
            postal_code=facts.postal_code,
            coordinates=coords,
        ),
        price=facts.price,
        currency=facts.currency,
        price_per_sqm=facts.price_per_sqm,
        details=CanonicalDetails(
            sqm=facts.sqm,
            rooms=facts.rooms,
            bedrooms=facts.bedrooms,
            bathrooms=facts.bathrooms,
            year_built=facts.year_built,
        ),
        images=list(facts.images),
        description=facts.description,
        features=extract_features(facts),
        amenities=CanonicalAmenities(
            has_parking=True if facts.parking_type else None,
            has_garden=(facts.plot_sqm > 0) if facts.plot_sqm is not None else None,
            is_new_construction=is_new_construction(facts.dutch_property_type),
        ),
        energy_rating=facts.energy_label,
        published_at=facts.publication_date,
        is_sold_or_rented=facts.is_sold_or_rented,
        status=derive_status(facts.is_sold_or_rented, facts.transaction_type),
        extension=build_extension(facts),
    )


def normalize_listing(raw: RawRecord | None, *, policy: ApiPolicy | None = None) -> CanonicalRecord:
    """Raw listing payload (dict or SourceRecord) → CanonicalRecord. Never raises on bad data."""
    return facts_to_canonical(parse_listing_facts(raw, policy=policy))


def build_ingestion_payload(raw: RawRecord, *, policy: ApiPolicy | None = None) -> IngestionPayload:
    """Wrap the canonical record with portal identity and the untouched source payload."""
    record = normalize_listing(raw, policy=policy)
    raw_data = dict(raw) if isinstance(raw, dict) else coerce_source_record(raw).model_dump(by_alias=True)
    return IngestionPayload(portal_id=record.tiny_id, data=record, raw_data=raw_data)


__all__ = [
    "parse_listing_facts",
    "facts_to_canonical",
    "normalize_listing",
    "build_extension",
    "extract_features",
    "derive_status",
    "build_ingestion_payload",
]
