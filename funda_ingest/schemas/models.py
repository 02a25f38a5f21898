# funda_ingest/schemas/models.py

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from funda_ingest.schemas.labels import ListingStatus, PropertyType, TransactionType

# Scalars allowed in the extension bag
ExtensionValue = str | int | float | bool

PriceUnit = Literal["total", "per_month"]


def _as_text(v: Any) -> str | None:
    """Wire values are usually strings; accept numbers, drop containers."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, str):
        return v
    if isinstance(v, (int, float)):
        try:
            return str(v)
        except ValueError:
            # ints past the str-conversion digit limit
            return None
    return None


def _as_list(v: Any) -> list[Any]:
    if isinstance(v, (list, tuple)):
        return [item for item in v if isinstance(item, (dict, BaseModel))]
    return []


def _as_block(v: Any) -> Any:
    """Nested blocks must be objects; anything else reads as absent."""
    return v if isinstance(v, (dict, BaseModel)) else None


def _as_float(v: Any) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        num = float(v.strip()) if isinstance(v, str) else float(v)
    except (TypeError, ValueError, OverflowError):
        return None
    return num if math.isfinite(num) else None


def _as_int(v: Any) -> int | None:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, float):
        return int(v) if math.isfinite(v) and v.is_integer() else None
    if isinstance(v, str) and v.strip().isdigit():
        try:
            return int(v.strip())
        except ValueError:
            return None
    return None


# =========================
# Raw characteristic tree (KenmerkSections)
# =========================


class RawField(BaseModel):
    """
    One characteristic ("kenmerk") leaf. May carry nested fields of its own
    (the wire nests KenmerkenList inside items for grouped facts).
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    field_id: str | None = Field(None, alias="Id", description="Stable field id, e.g. 'bouw-bouwjaar'. Often absent on display-only rows.")
    label: str | None = Field(None, alias="Label", description="Localized display label.")
    value: str | None = Field(None, alias="Value", description="Display value as shown in the app.")
    children: list[RawField] = Field(default_factory=list, alias="KenmerkenList")

    @field_validator("field_id", "label", "value", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)

    @field_validator("children", mode="before")
    @classmethod
    def _children(cls, v: Any) -> list[Any]:
        return _as_list(v)


class RawSection(BaseModel):
    """A named group of characteristic fields; may contain child sections."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    section_id: str | None = Field(None, alias="Id", description="Section id, e.g. 'bouw', 'afmetingen'.")
    title: str | None = Field(None, alias="Title")
    fields: list[RawField] = Field(default_factory=list, alias="KenmerkenList")
    sections: list[RawSection] = Field(default_factory=list, alias="KenmerkSections")

    @field_validator("section_id", "title", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)

    @field_validator("fields", "sections", mode="before")
    @classmethod
    def _items(cls, v: Any) -> list[Any]:
        return _as_list(v)


# =========================
# Source record (mobile API v4 listing detail)
# =========================


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Identifiers(_WireModel):
    global_id: int | None = Field(None, alias="GlobalId")
    tiny_id: str | None = Field(None, alias="TinyId")

    @field_validator("global_id", mode="before")
    @classmethod
    def _id(cls, v: Any) -> int | None:
        return _as_int(v)

    @field_validator("tiny_id", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)


class PriceBlock(_WireModel):
    selling_price: str | None = Field(None, alias="SellingPrice", description="Locale price text, e.g. '€ 450.000 k.k.'.")
    numeric_selling_price: float | None = Field(None, alias="NumericSellingPrice")
    is_auction: bool = Field(False, alias="IsAuction")

    @field_validator("selling_price", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)

    @field_validator("numeric_selling_price", mode="before")
    @classmethod
    def _number(cls, v: Any) -> float | None:
        if not isinstance(v, (int, float)):
            return None
        return _as_float(v)

    @field_validator("is_auction", mode="before")
    @classmethod
    def _flag(cls, v: Any) -> bool:
        return v if isinstance(v, bool) else False


class AddressDetails(_WireModel):
    title: str | None = Field(None, alias="Title")
    sub_title: str | None = Field(None, alias="SubTitle")
    city: str | None = Field(None, alias="City")
    province: str | None = Field(None, alias="Province")
    country: str | None = Field(None, alias="Country")
    house_number: str | None = Field(None, alias="HouseNumber")
    post_code: str | None = Field(None, alias="PostCode")
    neighborhood_name: str | None = Field(None, alias="NeighborhoodName")

    @field_validator("*", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)


class GeoPoint(_WireModel):
    latitude: float | None = Field(None, alias="Latitude")
    longitude: float | None = Field(None, alias="Longitude")

    @field_validator("*", mode="before")
    @classmethod
    def _coord(cls, v: Any) -> float | None:
        return _as_float(v)


class PhotoItem(_WireModel):
    id: str | None = Field(None, alias="Id")

    @field_validator("id", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)


class PhotoGallery(_WireModel):
    items: list[PhotoItem] = Field(default_factory=list, alias="Items")

    @field_validator("items", mode="before")
    @classmethod
    def _items(cls, v: Any) -> list[Any]:
        return _as_list(v)


class Brochure(_WireModel):
    cdn_url: str | None = Field(None, alias="CdnUrl")

    @field_validator("cdn_url", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)


class MediaBlock(_WireModel):
    photos: PhotoGallery | None = Field(None, alias="Photos")
    brochure: Brochure | None = Field(None, alias="Brochure")

    @field_validator("*", mode="before")
    @classmethod
    def _block(cls, v: Any) -> Any:
        return _as_block(v)


class FastView(_WireModel):
    living_area: str | None = Field(None, alias="LivingArea")
    plot_area: str | None = Field(None, alias="PlotArea")
    number_of_bedrooms: str | None = Field(None, alias="NumberOfBedrooms")
    energy_label: str | None = Field(None, alias="EnergyLabel")

    @field_validator("*", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)


class ObjectInsights(_WireModel):
    views: str | None = Field(None, alias="Views")
    saves: str | None = Field(None, alias="Saves")

    @field_validator("*", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)


class ListingDescription(_WireModel):
    title: str | None = Field(None, alias="Title")
    description: str | None = Field(None, alias="Description")

    @field_validator("*", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)


class FriendlyUrl(_WireModel):
    full_url: str | None = Field(None, alias="FullUrl")
    relative_url: str | None = Field(None, alias="RelativeUrl")

    @field_validator("*", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)


class ListingUrls(_WireModel):
    friendly_url: FriendlyUrl | None = Field(None, alias="FriendlyUrl")

    @field_validator("friendly_url", mode="before")
    @classmethod
    def _block(cls, v: Any) -> Any:
        return _as_block(v)


class ListingLabel(_WireModel):
    text: str | None = Field(None, alias="Text")

    @field_validator("text", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)


class SourceRecord(_WireModel):
    """
    Listing detail as returned by the Funda mobile API (v4).

    Only the blocks the normalizer reads are modeled; unknown keys are ignored.
    Build with `coerce_source_record()` to tolerate malformed blocks.
    """

    identifiers: Identifiers = Field(default_factory=Identifiers, alias="Identifiers")
    price: PriceBlock = Field(default_factory=PriceBlock, alias="Price")
    kenmerk_sections: list[RawSection] = Field(default_factory=list, alias="KenmerkSections")
    labels: list[ListingLabel] = Field(default_factory=list, alias="Labels")
    urls: ListingUrls = Field(default_factory=ListingUrls, alias="Urls")
    listing_description: ListingDescription | None = Field(None, alias="ListingDescription")
    address_details: AddressDetails = Field(default_factory=AddressDetails, alias="AddressDetails")
    coordinates: GeoPoint = Field(default_factory=GeoPoint, alias="Coordinates")
    media: MediaBlock | None = Field(None, alias="Media")
    fast_view: FastView = Field(default_factory=FastView, alias="FastView")
    is_sold_or_rented: bool = Field(False, alias="IsSoldOrRented")
    object_type: str | None = Field(None, alias="ObjectType", description="Generic (English) type label, e.g. 'House'.")
    offering_type: str | None = Field(None, alias="OfferingType", description="'Sale' or 'Rent' on the wire.")
    construction_type: str | None = Field(None, alias="ConstructionType")
    publication_date: str | None = Field(None, alias="PublicationDate")
    object_insights: ObjectInsights = Field(default_factory=ObjectInsights, alias="ObjectInsights")

    @field_validator("kenmerk_sections", "labels", mode="before")
    @classmethod
    def _items(cls, v: Any) -> list[Any]:
        return _as_list(v)

    @field_validator(
        "identifiers", "price", "urls", "address_details", "coordinates", "fast_view", "object_insights", mode="before"
    )
    @classmethod
    def _required_block(cls, v: Any) -> Any:
        block = _as_block(v)
        return {} if block is None else block

    @field_validator("listing_description", "media", mode="before")
    @classmethod
    def _optional_block(cls, v: Any) -> Any:
        return _as_block(v)

    @field_validator("object_type", "offering_type", "construction_type", "publication_date", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str | None:
        return _as_text(v)

    @field_validator("is_sold_or_rented", mode="before")
    @classmethod
    def _flag(cls, v: Any) -> bool:
        return v if isinstance(v, bool) else False


def coerce_source_record(raw: SourceRecord | dict[str, Any] | None) -> SourceRecord:
    """
    Build a SourceRecord from a wire payload without ever raising.

    Top-level blocks that fail validation are dropped (they fall back to their
    empty defaults) and validation is retried with the remaining blocks.
    """
    if isinstance(raw, SourceRecord):
        return raw
    if not isinstance(raw, dict):
        return SourceRecord()

    aliases = {name: f.alias or name for name, f in SourceRecord.model_fields.items()}
    data = dict(raw)
    while True:
        try:
            return SourceRecord.model_validate(data)
        except ValidationError as e:
            bad = {err["loc"][0] for err in e.errors() if err.get("loc")}
            # error locations may name the field or its wire alias
            bad |= {aliases[b] for b in bad if b in aliases}
            kept = {k: v for k, v in data.items() if k not in bad}
            if len(kept) == len(data):
                return SourceRecord()
            data = kept


# =========================
# Parsed facts (flat, portal-specific)
# =========================


class ListingFacts(BaseModel):
    """Flat facts read from one SourceRecord, before canonical mapping."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    tiny_id: str | None = None
    global_id: int | None = None
    url: str | None = None
    relative_url: str | None = None

    title: str | None = None
    address: str | None = None
    house_number: str | None = None
    address_subtitle: str | None = Field(None, description="Postcode and city line under the street address.")
    postal_code: str | None = None
    city: str | None = None
    province: str | None = None
    country: str = "Netherlands"
    neighborhood: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    price: float | None = Field(default=None, ge=0)
    price_text: str | None = None
    price_unit: PriceUnit = "total"
    is_auction: bool = False
    currency: str = "EUR"
    price_per_sqm_text: str | None = Field(None, description="Locale-formatted price per m², kept verbatim.")
    price_per_sqm: float | None = None

    sqm: int | None = None
    plot_sqm: int | None = None
    rooms: int | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    year_built: int | None = None

    object_type: str | None = None
    dutch_property_type: str | None = None
    construction_type: str | None = None
    energy_label: str | None = None
    parking_type: str | None = None

    description: str | None = None
    description_title: str | None = None
    images: list[str] = Field(default_factory=list)
    brochure_url: str | None = None
    labels: list[str] = Field(default_factory=list)

    views: int | None = None
    saves: int | None = None

    transaction_type: TransactionType = TransactionType.unknown
    publication_date: str | None = None
    is_sold_or_rented: bool = False


# =========================
# Canonical record
# =========================


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    lat: float
    lon: float


class CanonicalLocation(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    address: str | None = None
    city: str | None = None
    region: str | None = None
    country: str = "Netherlands"
    postal_code: str | None = None
    coordinates: Coordinates | None = None


class CanonicalDetails(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    sqm: int | None = Field(default=None, ge=0, description="Living area in m².")
    sqm_type: str = "living"
    rooms: int | None = Field(default=None, ge=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    year_built: int | None = None


class CanonicalAmenities(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    has_parking: bool | None = None
    has_garden: bool | None = None
    is_new_construction: bool | None = None


class CanonicalRecord(BaseModel):
    """
    Portal-agnostic listing record.

    Universal facts live in typed fields; market-specific facts without a
    universal slot go to `extension` (keys omitted when the source lacks them).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    portal: str = "funda"
    tiny_id: str | None = None
    global_id: int | None = None
    source_url: str | None = None
    title: str | None = None

    property_type: PropertyType = PropertyType.property
    transaction_type: TransactionType = TransactionType.unknown

    location: CanonicalLocation = Field(default_factory=CanonicalLocation)

    price: float | None = Field(default=None, ge=0)
    currency: str = "EUR"
    price_per_sqm: float | None = None

    details: CanonicalDetails = Field(default_factory=CanonicalDetails)

    images: list[str] = Field(default_factory=list)
    description: str | None = None
    description_language: str = "nl"
    features: list[str] = Field(default_factory=list)
    amenities: CanonicalAmenities = Field(default_factory=CanonicalAmenities)
    energy_rating: str | None = None

    published_at: str | None = None
    is_sold_or_rented: bool = False
    status: ListingStatus = ListingStatus.active

    extension: dict[str, ExtensionValue] = Field(default_factory=dict, description="Market-specific facts (extension bag).")

    def summary(self) -> str:
        bits: list[str] = [f"[{self.transaction_type.value.upper()}]"]
        if self.title:
            bits.append(self.title)
        if self.price is not None:
            bits.append(f"price={self.price:,.0f} {self.currency}")
        bits.append(f"type={self.property_type.value}")
        if self.details.sqm is not None:
            bits.append(f"{self.details.sqm} m²")
        if self.details.rooms is not None:
            bits.append(f"{self.details.rooms} rooms")
        if self.details.bedrooms is not None:
            bits.append(f"{self.details.bedrooms} bedrooms")
        bits.append(f"status={self.status.value}")
        return " | ".join(bits)


class IngestionPayload(BaseModel):
    """Envelope handed to the downstream ingestion service."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    portal: str = "funda"
    portal_id: str | None = None
    country: str = "netherlands"
    data: CanonicalRecord
    raw_data: dict[str, Any] = Field(default_factory=dict)


# =========================
# Batch results
# =========================


class BatchStats(BaseModel):
    """Throughput counters for one batch run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    requests_issued: int = Field(0, ge=0)
    processed: int = Field(0, ge=0)
    succeeded: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    elapsed_s: float = Field(0.0, ge=0)
    rate_per_s: float = Field(0.0, ge=0, description="Identifiers processed per second.")
    avg_time_per_item_s: float = Field(0.0, ge=0)
    success_rate: float = Field(0.0, ge=0, le=1)
    estimated_s_per_1000: float = Field(0.0, ge=0)

    @classmethod
    def from_counts(cls, *, requests_issued: int, succeeded: int, failed: int, elapsed_s: float) -> BatchStats:
        processed = succeeded + failed
        elapsed = max(0.0, elapsed_s)
        avg = elapsed / processed if processed else 0.0
        return cls(
            requests_issued=requests_issued,
            processed=processed,
            succeeded=succeeded,
            failed=failed,
            elapsed_s=elapsed,
            rate_per_s=processed / elapsed if elapsed > 0 else 0.0,
            avg_time_per_item_s=avg,
            success_rate=succeeded / processed if processed else 0.0,
            estimated_s_per_1000=avg * 1000,
        )


class BatchResult(BaseModel):
    """Outcome of one batch: successes in input order, failed identifiers, counters."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    records: list[CanonicalRecord] = Field(default_factory=list)
    failed_ids: list[str] = Field(default_factory=list)
    stats: BatchStats = Field(default_factory=BatchStats)

    def summary(self) -> str:
        s = self.stats
        return f"{s.succeeded} parsed, {s.failed} failed of {s.processed} in {s.elapsed_s:.2f}s (~{s.rate_per_s:.1f}/sec)"


class BenchmarkReport(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    total_s: float = Field(..., ge=0)
    requests_issued: int = Field(..., ge=0)
    avg_time_per_request_s: float = Field(..., ge=0)
    success_rate: float = Field(..., ge=0, le=1)
    estimated_s_per_1000: float = Field(..., ge=0)


# ============================================================
# Client policy
# ============================================================


class ApiPolicy(BaseModel):
    """
    Transport and pacing policy for the listing API client and batch runs.

    `min_delay_s` is the global spacing between request starts; it is enforced
    by the batch coordinator, not by the client.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    base_url: str = Field(
        "https://listing-detail-page.funda.io",
        description="Mobile API host.",
    )
    timeout_s: float = Field(
        30.0,
        gt=0,
        description="HTTP timeout in seconds for a single listing request.",
    )
    min_delay_s: float = Field(
        0.5,
        ge=0,
        description="Minimum seconds between the start of two consecutive requests.",
    )
    user_agent: str = Field(
        "Dart/3.9 (dart:io)",
        description="User-Agent sent with every request (mobile app client).",
    )
    platform: str = Field(
        "android",
        description="Value of the X-Funda-App-Platform header.",
    )
    country: str = Field(
        "nl",
        min_length=2,
        max_length=2,
        description="Country segment of the listing endpoint path.",
    )
    image_base_url: str = Field(
        "https://cloud.funda.nl/valentina_media",
        description="CDN prefix used to build photo URLs from media item ids.",
    )
    image_size: str = Field(
        "1440x960",
        description="Photo size suffix appended to media ids.",
    )
