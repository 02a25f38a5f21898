# tests/unit/test_section_extractor.py
from __future__ import annotations

import pytest

from funda_ingest.core.extract import (
    KENMERK_FIELDS,
    find_section,
    flatten_fields,
    flatten_to_mapping,
    resolve,
    resolve_attribute,
)
from funda_ingest.schemas.models import RawSection
from tests.utils import default_sections, make_field, make_section


def test_resolve_top_level_field():
    assert resolve(default_sections(), "bouw", "bouw-bouwjaar") == "1930"


def test_resolve_nested_field_inside_group():
    sections = default_sections()
    assert resolve(sections, "afmetingen", "afmetingen-gebruiksoppervlakten-wonen") == "120 m²"
    assert resolve(sections, "afmetingen", "afmetingen-gebruiksoppervlakten-tuin") == "85 m²"


def test_resolve_field_in_child_section():
    sections = [
        make_section(
            "energie",
            make_field("energie-isolatie", "Dubbel glas"),
            sections=[make_section("energie-detail", make_field("energie-verwarming", "Cv-ketel"))],
        )
    ]
    assert resolve(sections, "energie", "energie-verwarming") == "Cv-ketel"


def test_section_fields_precede_child_section_fields():
    sections = [
        make_section(
            "bouw",
            make_field("bouw-bouwjaar", "1930"),
            sections=[make_section("bouw-extra", make_field("bouw-bouwjaar", "1999"))],
        )
    ]
    assert resolve(sections, "bouw", "bouw-bouwjaar") == "1930"


def test_duplicate_field_id_first_occurrence_wins():
    sections = [make_section("bouw", make_field("bouw-bouwjaar", "1930"), make_field("bouw-bouwjaar", "1950"))]
    assert resolve(sections, "bouw", "bouw-bouwjaar") == "1930"


def test_duplicate_section_id_first_section_wins():
    sections = [
        make_section("bouw", make_field("bouw-soortbouw", "Bestaande bouw")),
        make_section("bouw", make_field("bouw-bouwjaar", "1950")),
    ]
    assert find_section(sections, "bouw").fields[0].value == "Bestaande bouw"
    # the later duplicate is never consulted
    assert resolve(sections, "bouw", "bouw-bouwjaar") is None


def test_flatten_is_depth_first_parent_before_children():
    section = RawSection.model_validate(
        make_section(
            "s",
            make_field("a", "1", children=[make_field("a1", "2"), make_field("a2", "3")]),
            make_field("b", "4"),
            sections=[make_section("t", make_field("c", "5"))],
        )
    )
    assert [f.field_id for f in flatten_fields(section)] == ["a", "a1", "a2", "b", "c"]


@pytest.mark.parametrize(
    "section_id, field_id",
    [
        ("onbekend", "bouw-bouwjaar"),
        ("bouw", "bouw-onbekend"),
    ],
)
def test_missing_section_or_field_is_absent(section_id, field_id):
    assert resolve(default_sections(), section_id, field_id) is None


def test_empty_value_is_absent():
    sections = [make_section("bouw", make_field("bouw-bouwjaar", ""))]
    assert resolve(sections, "bouw", "bouw-bouwjaar") is None


@pytest.mark.parametrize(
    "sections",
    [
        None,
        [],
        "not a list",
        {"Id": "bouw"},
        [1, None, "x"],
        [{"Id": "bouw", "KenmerkenList": "oops"}],
        [{"Id": "bouw", "KenmerkenList": [None, 3, {"Id": None, "Value": None}]}],
    ],
)
def test_malformed_trees_never_raise(sections):
    assert resolve(sections, "bouw", "bouw-bouwjaar") is None
    assert isinstance(flatten_to_mapping(sections), dict)


def test_numeric_wire_values_are_read_as_text():
    sections = [{"Id": "bouw", "KenmerkenList": [{"Id": "bouw-bouwjaar", "Value": 1930}]}]
    assert resolve(sections, "bouw", "bouw-bouwjaar") == "1930"


def test_accepts_model_instances():
    sections = [RawSection.model_validate(s) for s in default_sections()]
    assert resolve(sections, "energie", "energie-energielabel") == "C"


def test_resolve_attribute_uses_named_table():
    sections = default_sections()
    assert resolve_attribute(sections, "year_built") == "1930"
    assert resolve_attribute(sections, "living_area") == "120 m²"
    assert resolve_attribute(sections, "price_per_sqm") == "€ 3.750"
    assert set(KENMERK_FIELDS) >= {"rooms", "bedrooms", "energy_label", "parking_type"}


def test_resolve_attribute_unknown_name_raises():
    with pytest.raises(KeyError):
        resolve_attribute(default_sections(), "swimming_pool")


def test_flatten_to_mapping_keeps_first_occurrence():
    sections = [
        make_section("a", make_field("x", "1"), make_field("y", None)),
        make_section("b", make_field("x", "2"), make_field("z", "3")),
        make_section("a", make_field("w", "4")),
    ]
    assert flatten_to_mapping(sections) == {"x": "1", "z": "3"}
