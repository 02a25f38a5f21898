# tests/utils.py
"""
Shared factories for tests.

- make_field / make_section: wire-shaped KenmerkSections building blocks
- make_raw_listing: a complete mobile-API listing payload (dict), overridable
- FakeClock: virtual monotonic clock whose sleep() advances time
- FakeResponse / FakeSession: requests.Session stand-ins for the API client
"""

from __future__ import annotations

import copy
import json
from typing import Any

# ---------------------------
# Characteristic tree factories
# ---------------------------


def make_field(field_id: str | None, value: str | None, *, label: str | None = None, children: list[dict] | None = None) -> dict[str, Any]:
    out: dict[str, Any] = {"Id": field_id, "Label": label or field_id, "Value": value}
    if children:
        out["KenmerkenList"] = children
    return out


def make_section(section_id: str | None, *fields: dict[str, Any], sections: list[dict] | None = None, title: str | None = None) -> dict[str, Any]:
    out: dict[str, Any] = {"Id": section_id, "Title": title or section_id, "KenmerkenList": list(fields)}
    if sections:
        out["KenmerkSections"] = sections
    return out


def default_sections() -> list[dict[str, Any]]:
    return [
        make_section(
            "overdracht",
            make_field("overdracht-vraagprijs", "€ 450.000 k.k."),
            make_field("overdracht-vraagprijsperm2", "€ 3.750"),
        ),
        make_section(
            "bouw",
            make_field("bouw-soortobject", "Eengezinswoning, tussenwoning"),
            make_field("bouw-soortbouw", "Bestaande bouw"),
            make_field("bouw-bouwjaar", "1930"),
        ),
        make_section(
            "afmetingen",
            make_field(
                "afmetingen-gebruiksoppervlakten",
                None,
                children=[
                    make_field("afmetingen-gebruiksoppervlakten-wonen", "120 m²"),
                    make_field("afmetingen-gebruiksoppervlakten-tuin", "85 m²"),
                ],
            ),
        ),
        make_section(
            "indeling",
            make_field("indeling-kamers", "5 kamers (4 slaapkamers)"),
            make_field("indeling-slaapkamers", "4"),
            make_field("indeling-badkamers", "1 badkamer en 1 apart toilet"),
        ),
        make_section("energie", make_field("energie-energielabel", "C")),
        make_section("parkeergelegenheid", make_field("parkeergelegenheid-soort", "Openbaar parkeren")),
    ]


def make_raw_listing(**overrides: Any) -> dict[str, Any]:
    """
    A sold single-family house in Amsterdam, shaped like the v4 listing
    detail response. Top-level keys in `overrides` replace the defaults.
    """
    raw: dict[str, Any] = {
        "Identifiers": {"GlobalId": 7123456, "TinyId": "43117443"},
        "Price": {"SellingPrice": "€ 450.000 k.k.", "IsAuction": False},
        "KenmerkSections": default_sections(),
        "Labels": [{"Text": "Verkocht", "Type": "status"}],
        "Urls": {
            "FriendlyUrl": {
                "FullUrl": "https://www.funda.nl/detail/koop/amsterdam/huis-keizersgracht-1/43117443/",
                "RelativeUrl": "/detail/koop/amsterdam/huis-keizersgracht-1/43117443/",
            }
        },
        "ListingDescription": {"Title": "Keizersgracht 1", "Description": "  Ruime eengezinswoning met tuin.  "},
        "AddressDetails": {
            "Title": "Keizersgracht 1",
            "SubTitle": "1015 CJ Amsterdam",
            "City": "Amsterdam",
            "Province": "Noord-Holland",
            "Country": "Netherlands",
            "HouseNumber": "1",
            "PostCode": "1015 CJ",
            "NeighborhoodName": "Grachtengordel-West",
        },
        "Coordinates": {"Latitude": 52.3778, "Longitude": 4.8897},
        "Media": {
            "Photos": {"Items": [{"Id": "224/655/001"}, {"Id": "224/655/002"}]},
            "Brochure": {"CdnUrl": "https://cloud.funda.nl/brochure/43117443.pdf"},
        },
        "FastView": {"LivingArea": "118 m²", "PlotArea": "80 m²", "NumberOfBedrooms": "3", "EnergyLabel": "D"},
        "IsSoldOrRented": True,
        "ObjectType": "House",
        "OfferingType": "Sale",
        "ConstructionType": "Resale",
        "PublicationDate": "2025-01-15T10:00:00",
        "ObjectInsights": {"Views": "1.234", "Saves": "56"},
    }
    raw.update(copy.deepcopy(overrides))
    return raw


# ---------------------------
# Time
# ---------------------------


class FakeClock:
    """Virtual monotonic clock; `sleep` advances it and records the call."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += max(0.0, seconds)

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------
# HTTP
# ---------------------------


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, *, content: bytes | None = None, url: str = "") -> None:
        self.status_code = status_code
        self.url = url
        if content is None:
            content = b"" if payload is None else json.dumps(payload).encode("utf-8")
        self.content = content

    def json(self) -> Any:
        return json.loads(self.content.decode("utf-8"))


class FakeSession:
    """
    Minimal requests.Session stand-in.

    `routes` maps a URL suffix to a FakeResponse or an exception instance
    to raise; unmatched URLs answer 404.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes = routes or {}
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, float | None]] = []
        self.closed = False

    def get(self, url: str, timeout: float | None = None) -> FakeResponse:
        self.calls.append((url, timeout))
        for suffix, answer in self.routes.items():
            if url.endswith(suffix):
                if isinstance(answer, BaseException):
                    raise answer
                return answer
        return FakeResponse(404, url=url)

    def close(self) -> None:
        self.closed = True
