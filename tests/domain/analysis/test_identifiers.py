from __future__ import annotations

import pytest

from lodmapper.domain.analysis import (
    analyze_fields_for_identifiers,
    classify,
    detect_all,
    identifier_property,
)
from lodmapper.domain.model import IdentifierType


def test_ark_in_identifier_field_maps_to_ark_property() -> None:
    match = classify("dcterms:identifier", "ark:/12345/x6")

    assert match.type is IdentifierType.ARK
    assert match.property_id == "P8091"
    assert match.value == "ark:/12345/x6"
    assert match.mappable


@pytest.mark.parametrize(
    ("sample", "expected_type", "expected_property", "expected_value"),
    [
        ("https://viaf.org/viaf/102333412", IdentifierType.VIAF, "P214", "102333412"),
        ("https://www.geonames.org/2950159", IdentifierType.GEONAMES, "P1566", "2950159"),
        ("https://orcid.org/0000-0002-1825-0097", IdentifierType.ORCID, "P496", None),
        ("https://doi.org/10.1000/182", IdentifierType.DOI, "P356", "10.1000/182"),
        ("978-3-16-148410-0", IdentifierType.ISBN_13, "P212", None),
        ("0-306-40615-2", IdentifierType.ISBN_10, "P957", None),
        ("2049-3630", IdentifierType.ISSN, "P236", None),
    ],
)
def test_classify_recognizes_identifier_families(
    sample: str,
    expected_type: IdentifierType,
    expected_property: str,
    expected_value: str | None,
) -> None:
    match = classify("schema:sameAs", sample)

    assert match.type is expected_type
    assert match.property_id == expected_property
    if expected_value is not None:
        assert match.value == expected_value


def test_classify_reads_value_objects() -> None:
    literal = [{"type": "literal", "@value": " ark:/12345/x6 "}]
    link = {"type": "uri", "@id": "https://viaf.org/viaf/42"}

    assert classify("dcterms:identifier", literal).value == "ark:/12345/x6"
    assert classify("schema:sameAs", link).value == "42"


def test_knowledge_base_links_are_recognized_but_not_mappable() -> None:
    match = classify("schema:about", "http://www.wikidata.org/entity/Q42")

    assert match.type is IdentifierType.WIKIDATA
    assert match.recognized
    assert not match.mappable


def test_plain_text_is_unknown() -> None:
    assert classify("dcterms:title", "A history of maps").type is IdentifierType.UNKNOWN
    assert classify("dcterms:title", None).type is IdentifierType.UNKNOWN
    assert classify("dcterms:title", []).type is IdentifierType.UNKNOWN


def test_detect_all_reports_every_recognized_element() -> None:
    values = ["no id here", "https://viaf.org/viaf/1", "ark:/13030/tf5p30086k"]

    hits = detect_all("dcterms:identifier", values)

    assert [(index, match.type) for index, match in hits] == [
        (1, IdentifierType.VIAF),
        (2, IdentifierType.ARK),
    ]


def test_analyze_fields_for_identifiers_keeps_first_mappable_value() -> None:
    records = [
        {"@id": "x", "dcterms:title": "Plain"},
        {"dcterms:identifier": ["ark:/1/a", "ark:/1/b"]},
        {"dcterms:identifier": "https://viaf.org/viaf/9"},
    ]

    fields = analyze_fields_for_identifiers(records)

    assert list(fields) == ["dcterms:identifier"]
    entry = fields["dcterms:identifier"]
    assert entry.detection.type is IdentifierType.ARK
    assert entry.multiple_detected


def test_identifier_property_is_external_id() -> None:
    prop = identifier_property(classify("dcterms:identifier", "ark:/12345/x6"))

    assert prop.id == "P8091"
    assert prop.datatype == "external-id"
    assert not prop.constraints_fetched


def test_identifier_property_requires_a_target() -> None:
    with pytest.raises(ValueError, match="no target property"):
        identifier_property(classify("schema:about", "https://www.wikidata.org/wiki/Q1"))
