from __future__ import annotations

import asyncio

from lodmapper.domain.model import (
    MappingKey,
    MatchRef,
    MatchType,
    PropertyConstraints,
    ReconciliationRecord,
    ReconciliationStatus,
    RecordKey,
    ValueTypeConstraint,
)
from lodmapper.domain.reconciliation import (
    UNREACHABLE_URL,
    ReconciliationStore,
    check_url_reachability,
    confirm_link_backed,
    constraint_factor,
    linked_entity_id,
    rank_matches,
    suggest_matches,
)
from lodmapper.domain.session import Session
from tests.helpers.lookups import FakeSearcher, FakeUrlProbe, make_property

CREATOR = make_property(
    "P50",
    label="author",
    datatype="wikibase-item",
    constraints=PropertyConstraints(value_type=(ValueTypeConstraint(classes=("Q5",)),)),
)


def _record(item_id: str, value: str, *, datatype: str = "wikibase-item") -> ReconciliationRecord:
    return ReconciliationRecord(
        key=RecordKey(item_id, "schema:creator::P50"),
        property_id="P50",
        datatype=datatype,
        original_value=value,
    )


def _store() -> ReconciliationStore:
    store = ReconciliationStore()
    store.add(_record("item-1", "Blaeu"))
    store.add(_record("item-2", " Blaeu "))
    store.add(_record("item-3", "https://www.wikidata.org/wiki/Q42"))
    store.add(_record("item-4", "Fail"))
    store.add(_record("item-5", "Blaeu", datatype="string"))
    return store


def _person(entity_id: str, score: float, *types: str) -> MatchRef:
    return MatchRef(type=MatchType.ENTITY, id=entity_id, label=entity_id, score=score, types=types)


def test_link_backed_values_are_confirmed_with_certainty() -> None:
    store = _store()

    confirmed = confirm_link_backed(store)

    record = store.get(RecordKey("item-3", "schema:creator::P50"))
    assert confirmed == 1
    assert record.status is ReconciliationStatus.RECONCILED
    assert record.confidence == 100
    assert record.selected_match is not None
    assert record.selected_match.url == "https://www.wikidata.org/wiki/Q42"


def test_identical_queries_are_searched_once_and_failures_reported() -> None:
    store = _store()
    confirm_link_backed(store)
    searcher = FakeSearcher(
        results={"Blaeu": [_person("Q2", 80), _person("Q1", 90, "Q5")]},
        failures={"Fail"},
    )

    summary = asyncio.run(suggest_matches(store, searcher, properties={"P50": CREATOR}))

    assert searcher.calls == [("Blaeu", ("Q5",)), ("Fail", ("Q5",))]
    assert (summary.searched, summary.updated) == (2, 2)
    assert summary.failures[0].keys == (RecordKey("item-4", "schema:creator::P50"),)
    ranked = store.get(RecordKey("item-2", "schema:creator::P50")).matches
    assert [(match.id, match.score) for match in ranked] == [("Q1", 99.0), ("Q2", 61.6)]
    assert not store.get(RecordKey("item-4", "schema:creator::P50")).searched


def test_already_searched_records_are_skipped_unless_refreshed() -> None:
    store = _store()
    confirm_link_backed(store)
    searcher = FakeSearcher(results={"Blaeu": [_person("Q1", 90, "Q5")], "Fail": []})
    asyncio.run(suggest_matches(store, searcher))

    again = asyncio.run(suggest_matches(store, searcher))
    refreshed = asyncio.run(suggest_matches(store, searcher, refresh=True))

    assert again.searched == 0
    assert refreshed.searched == 2


def test_linked_entity_id_accepts_ids_and_links() -> None:
    assert linked_entity_id("Q42") == "Q42"
    assert linked_entity_id("http://www.wikidata.org/entity/Q42") == "Q42"
    assert linked_entity_id("https://wikidata.org/wiki/Q7") == "Q7"
    assert linked_entity_id("Q42 and more") is None
    assert linked_entity_id("https://example.org/Q42") is None


def test_constraint_factor_penalizes_type_mismatch() -> None:
    assert round(constraint_factor(_person("Q1", 50, "Q5"), CREATOR, "Blaeu"), 2) == 110.0
    assert round(constraint_factor(_person("Q1", 50), CREATOR, "Blaeu"), 2) == 77.0


def test_rank_matches_caps_scores_at_100() -> None:
    ranked = rank_matches([_person("Q1", 99, "Q5"), _person("Q2", 100)], CREATOR, "Blaeu")

    assert [(match.id, match.score) for match in ranked] == [("Q1", 100.0), ("Q2", 77.0)]


class _RenamingSearcher:
    """Changes a mapping's sub-field while the first search is in flight."""

    def __init__(self, session: Session, mapping_id: str) -> None:
        self.session = session
        self.mapping_id = mapping_id
        self.inner = FakeSearcher(
            results={"Blaeu": [_person("Q1", 90)], "Elsevier": [_person("Q3", 80)]}
        )

    async def search_entities(
        self,
        query: str,
        *,
        language: str = "en",
        limit: int = 10,
        type_ids: tuple[str, ...] = (),
    ) -> list[MatchRef]:
        if query == "Blaeu":
            self.session.mapping.change_subfield(self.mapping_id, "o:label")
        return await self.inner.search_entities(
            query, language=language, limit=limit, type_ids=type_ids
        )


def test_records_renamed_during_search_are_left_out() -> None:
    session = Session()
    session.load_records(
        [
            {
                "@id": "item-1",
                "schema:creator": [{"type": "literal", "@value": "Blaeu", "o:label": "Blaeu"}],
                "schema:publisher": "Elsevier",
            }
        ]
    )
    session.mapping.seed([MappingKey(key="schema:creator"), MappingKey(key="schema:publisher")])
    creator = session.mapping.map("schema:creator", make_property("P50", datatype="wikibase-item"))
    publisher = session.mapping.map(
        "schema:publisher", make_property("P123", datatype="wikibase-item")
    )
    session.initialize_reconciliation()
    old_id = creator.mapping_id

    summary = asyncio.run(
        suggest_matches(session.reconciliation, _RenamingSearcher(session, old_id))
    )

    assert (summary.searched, summary.updated) == (2, 1)
    renamed = session.reconciliation.get(RecordKey("item-1", creator.mapping_id))
    assert creator.mapping_id != old_id
    assert not renamed.searched
    searched = session.reconciliation.get(RecordKey("item-1", publisher.mapping_id))
    assert [match.id for match in searched.matches] == ["Q3"]


def test_unreachable_urls_get_an_advisory_warning() -> None:
    store = ReconciliationStore()
    for item_id, url in (("item-1", "https://example.org/up"), ("item-2", "https://gone.test")):
        store.add(
            ReconciliationRecord(
                key=RecordKey(item_id, "schema:url::P856"),
                property_id="P856",
                datatype="url",
                original_value=url,
            )
        )
    store.add(_record("item-3", "https://gone.test"))
    probe = FakeUrlProbe(reachable={"https://example.org/up"})

    unreachable = asyncio.run(check_url_reachability(store, probe))

    assert unreachable == 1
    assert probe.calls == ["https://example.org/up", "https://gone.test"]
    assert store.get(RecordKey("item-1", "schema:url::P856")).warnings == ()
    gone = store.get(RecordKey("item-2", "schema:url::P856"))
    assert gone.warnings == (UNREACHABLE_URL,)
    assert gone.status is ReconciliationStatus.PENDING
