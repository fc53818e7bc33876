from __future__ import annotations

from lodmapper.domain.analysis import (
    RAW_VALUE_FIELD,
    IgnoreRules,
    analyze,
    context_prefixes,
    extract_available_fields,
    extract_sample_value,
    get_field_value,
    linked_data_uri,
    value_to_string,
)
from lodmapper.domain.model import IdentifierType, KeyCategory, ValueType


def _records() -> list[dict[str, object]]:
    return [
        {
            "@context": {"dcterms": "http://purl.org/dc/terms/"},
            "@id": "https://example.org/api/items/1",
            "o:id": 1,
            "dcterms:title": [{"type": "literal", "@value": "Map of Leiden"}],
            "dcterms:date": [{"type": "literal", "@value": "1920"}],
            "dcterms:identifier": [{"type": "literal", "@value": "ark:/12345/x6"}],
        },
        {
            "@id": "https://example.org/api/items/2",
            "o:id": 2,
            "dcterms:title": [{"type": "literal", "@value": "Map of Delft"}],
            "dcterms:date": [{"type": "literal", "@value": "unknown"}],
        },
    ]


def test_analyze_counts_frequency_and_skips_json_ld_keys() -> None:
    keys = analyze(_records())

    by_name = {key.key: key for key in keys}
    assert set(by_name) == {"o:id", "dcterms:title", "dcterms:date", "dcterms:identifier"}
    assert by_name["dcterms:title"].frequency == 2
    assert by_name["dcterms:title"].total_items == 2
    assert by_name["dcterms:identifier"].coverage == 0.5
    # highest frequency first, ties keep first-seen order
    assert [key.key for key in keys] == [
        "o:id",
        "dcterms:title",
        "dcterms:date",
        "dcterms:identifier",
    ]


def test_analyze_applies_ignore_rules() -> None:
    keys = analyze(_records(), ignore_rules=IgnoreRules.from_patterns(["o:"]))

    categories = {key.key: key.category for key in keys}
    assert categories["o:id"] is KeyCategory.IGNORED
    assert categories["dcterms:title"] is KeyCategory.NON_LINKED


def test_analyze_reports_ambiguous_types_with_majority_tie_to_first_seen() -> None:
    keys = {key.key: key for key in analyze(_records())}

    date = keys["dcterms:date"]
    assert date.ambiguous_type
    assert date.value_type is ValueType.DATE
    assert date.type_counts == {ValueType.DATE: 1, ValueType.STRING: 1}
    assert not keys["dcterms:title"].ambiguous_type


def test_analyze_resolves_linked_data_uris_and_identifiers() -> None:
    context = {"o": "http://omeka.org/s/vocabs/o#"}
    keys = {key.key: key for key in analyze(_records(), context=context)}

    assert keys["dcterms:title"].linked_data_uri == "http://purl.org/dc/terms/title"
    assert keys["o:id"].linked_data_uri == "http://omeka.org/s/vocabs/o#id"
    assert keys["dcterms:identifier"].identifier.type is IdentifierType.ARK
    assert keys["dcterms:identifier"].sample_value == {
        "type": "literal",
        "@value": "ark:/12345/x6",
    }


def test_analyze_accepts_items_wrapper_and_single_record() -> None:
    wrapped = analyze({"items": _records()})
    single = analyze({"dcterms:title": "Only one"})

    assert len(wrapped) == 4
    assert [(key.key, key.total_items) for key in single] == [("dcterms:title", 1)]


def test_ignore_rules_split_prefixes_and_exact_keys() -> None:
    rules = IgnoreRules.from_patterns(["o:", " dcterms:rights ", ""])

    assert rules.matches("o:created")
    assert rules.matches("dcterms:rights")
    assert not rules.matches("dcterms:rightsHolder")
    assert not rules.matches("dcterms:title")


def test_context_prefixes_reads_nested_and_expanded_terms() -> None:
    context = {
        "@context": [
            {"ex": "http://example.org/ns/"},
            {"bibo": {"@id": "http://purl.org/ontology/bibo/"}, "count": 3},
        ]
    }

    assert context_prefixes(context) == {
        "ex": "http://example.org/ns/",
        "bibo": "http://purl.org/ontology/bibo/",
    }
    assert context_prefixes("https://example.org/context.jsonld") == {}


def test_linked_data_uri_falls_back_to_default_namespace() -> None:
    assert linked_data_uri("title", {"": "http://example.org/terms#"}) == (
        "http://example.org/terms#title"
    )
    assert linked_data_uri("unknown:thing", {}) is None
    assert linked_data_uri("foaf:name", {}) == "http://xmlns.com/foaf/0.1/name"


def test_value_to_string_prefers_meaningful_fields() -> None:
    assert value_to_string([{"type": "literal", "@value": "Title"}]) == "Title"
    assert value_to_string({"type": "uri", "@id": "https://x.org", "o:label": "X"}) == "X"
    assert value_to_string({"type": "resource", "display_title": "Item"}) == "Item"
    assert value_to_string(None) == ""
    assert value_to_string(True) == "true"


def test_sample_value_is_first_array_element() -> None:
    assert extract_sample_value(["first", "second"]) == "first"
    assert extract_sample_value([]) is None
    assert extract_sample_value({"@value": "x"}) == {"@value": "x"}


def test_available_fields_preview_each_key() -> None:
    sample = [
        {
            "@value": "A very long title that runs past the preview",
            "@language": None,
            "o:label": {"nested": True},
            "count": 3,
        }
    ]

    fields = extract_available_fields(sample)

    assert fields == [
        ("@value", "A very long title that runs pa..."),
        ("@language", "null"),
        ("o:label", "[Object/Array]"),
        ("count", "3"),
    ]


def test_available_fields_for_scalars_and_empties() -> None:
    assert extract_available_fields([]) == [(RAW_VALUE_FIELD, "Empty Array")]
    assert extract_available_fields({}) == [(RAW_VALUE_FIELD, "No fields available")]
    assert extract_available_fields("") == [(RAW_VALUE_FIELD, "N/A")]
    assert extract_available_fields(1648) == [(RAW_VALUE_FIELD, "1648")]


def test_field_value_reads_named_field_or_whole_value() -> None:
    sample = [{"type": "literal", "@value": "Kaart", "@language": "nl"}]

    assert get_field_value(sample, "@language") == "nl"
    assert get_field_value(sample, RAW_VALUE_FIELD) == "Kaart"
    assert get_field_value(sample, None) == "Kaart"
    assert get_field_value(sample, "o:label") == ""
    assert get_field_value([], "@value") == ""
