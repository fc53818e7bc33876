from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from lodmapper import app as app_module
from lodmapper.adapters.omeka import SourceAPIError
from lodmapper.app import (
    analyze_records,
    load_source_records,
    suggest_reconciliations,
)
from lodmapper.config import MappingConfig, ReconciliationConfig
from lodmapper.domain.model import KeyCategory, MappingKey, RecordKey
from lodmapper.domain.reconciliation import UNREACHABLE_URL
from lodmapper.domain.session import Session
from tests.helpers.lookups import (
    FakePropertyLookup,
    FakeSearcher,
    FakeUrlProbe,
    make_entity,
    make_property,
)

CONTEXT_URL = "https://collection.example.org/api-context"


def _records() -> list[dict[str, object]]:
    return [
        {
            "@context": CONTEXT_URL,
            "@id": "https://collection.example.org/api/items/1",
            "o:id": 1,
            "dcterms:title": "Atlas Maior",
            "dcterms:identifier": "https://viaf.org/viaf/102333412",
            "ex:shelfmark": "A 1",
        },
        {
            "@id": "https://collection.example.org/api/items/2",
            "o:id": 2,
            "dcterms:title": "Kaart van Leyden",
            "dcterms:identifier": "https://viaf.org/viaf/9",
        },
    ]


def test_analyze_records_maps_identifier_keys() -> None:
    lookup = FakePropertyLookup(
        properties={"P214": make_property("P214", label="VIAF ID", datatype="external-id")}
    )
    contexts: list[str] = []

    def resolver(url: str) -> dict[str, str]:
        contexts.append(url)
        return {"ex": "https://collection.example.org/ns/"}

    result = analyze_records(_records(), property_lookup=lookup, context_resolver=resolver)

    categories = {key.key: key.category for key in result.keys}
    assert categories == {
        "o:id": KeyCategory.IGNORED,
        "dcterms:title": KeyCategory.NON_LINKED,
        "dcterms:identifier": KeyCategory.MAPPED,
        "ex:shelfmark": KeyCategory.NON_LINKED,
    }
    assert lookup.calls == ["P214"]
    assert contexts == [CONTEXT_URL]
    assert result.auto_mapped.success_count == 1
    shelfmark = result.session.mapping.key("ex:shelfmark")
    assert shelfmark.linked_data_uri == "https://collection.example.org/ns/shelfmark"
    assert [manual.property.id for manual in result.session.mapping.manual_properties()] == [
        "label",
        "description",
        "aliases",
    ]
    assert result.session.get_state().item_count == 2


def test_analyze_records_survives_unresolvable_context() -> None:
    def resolver(url: str) -> dict[str, str]:
        raise SourceAPIError(f"cannot fetch {url}")

    result = analyze_records(
        _records(), context_resolver=resolver, auto_map_identifiers=False
    )

    shelfmark = result.session.mapping.key("ex:shelfmark")
    assert shelfmark.linked_data_uri is None
    assert result.auto_mapped.success_count == 0
    assert result.session.mapping.key("dcterms:identifier").category is KeyCategory.NON_LINKED


def test_analyze_records_uses_configured_ignore_patterns() -> None:
    config = MappingConfig(ignored_key_patterns=("dcterms:title",), from_defaults=False)

    result = analyze_records(
        _records(),
        mapping_config=config,
        context_resolver=lambda _url: {},
        auto_map_identifiers=False,
    )

    ignored = [key.key for key in result.session.mapping.keys_in(KeyCategory.IGNORED)]
    assert ignored == ["dcterms:title"]


def test_suggest_reconciliations_confirms_links_and_searches_the_rest() -> None:
    session = Session()
    session.load_records(
        [
            {"@id": "item-1", "schema:creator": "Blaeu"},
            {"@id": "item-2", "schema:creator": "http://www.wikidata.org/entity/Q42"},
        ]
    )
    session.mapping.seed([MappingKey(key="schema:creator", frequency=2, total_items=2)])
    session.mapping.map("schema:creator", make_property("P50", datatype="wikibase-item"))
    searcher = FakeSearcher(results={"Blaeu": [make_entity("Q130", score=90)]})

    result = suggest_reconciliations(session, searcher=searcher, language="nl")

    assert result.link_backed == 1
    assert (result.suggestions.searched, result.suggestions.updated) == (1, 1)
    assert searcher.calls == [("Blaeu", ())]
    assert session.reconciliation.progress().reconciled == 1


@pytest.mark.parametrize("probe_urls", [True, False])
def test_suggest_reconciliations_probes_urls_when_configured(probe_urls: bool) -> None:
    session = Session()
    session.load_records([{"@id": "item-1", "foaf:homepage": "https://gone.example.org"}])
    session.mapping.seed([MappingKey(key="foaf:homepage", frequency=1, total_items=1)])
    entry = session.mapping.map("foaf:homepage", make_property("P856", datatype="url"))
    probe = FakeUrlProbe()

    result = suggest_reconciliations(
        session,
        searcher=FakeSearcher(),
        reconciliation_config=ReconciliationConfig(probe_urls=probe_urls),
        url_probe=probe,
    )

    record = session.reconciliation.get(RecordKey("item-1", entry.mapping_id))
    if probe_urls:
        assert result.unreachable_urls == 1
        assert record.warnings == (UNREACHABLE_URL,)
    else:
        assert probe.calls == []
        assert record.warnings == ()


def test_load_source_records_prefers_local_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "records.json"
    path.write_text('[{"o:id": 1}, {"o:id": 2}, {"o:id": 3}]', encoding="utf-8")

    def fail_fetch(*_: object, **__: object) -> None:
        raise AssertionError("API must not be called")

    monkeypatch.setattr(app_module, "fetch_records", fail_fetch)

    records = load_source_records(records_file=path, max_items=2)

    assert records == [{"o:id": 1}, {"o:id": 2}]


def test_load_source_records_fetches_from_api(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_fetch(url: str | None, **kwargs: object) -> list[dict[str, object]]:
        captured.update(kwargs, url=url)
        return [{"o:id": 1}]

    monkeypatch.setattr(app_module, "fetch_records", fake_fetch)

    records = load_source_records(source_url="https://example.org/api/items", per_page=25)

    assert records == [{"o:id": 1}]
    assert captured == {"url": "https://example.org/api/items", "per_page": 25, "max_items": None}
