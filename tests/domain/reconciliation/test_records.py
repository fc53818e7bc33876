from __future__ import annotations

import pytest

from lodmapper.domain.events import ChangeFeed, RecordStatusChanged
from lodmapper.domain.mapping import MappingStore
from lodmapper.domain.model import (
    MappingKey,
    MatchRef,
    MatchType,
    ReconciliationRecord,
    ReconciliationStatus,
    RecordKey,
)
from lodmapper.domain.reconciliation import (
    IncompleteMatchError,
    InvalidTransitionError,
    ReconciliationStore,
    UnknownRecordError,
    default_confidence,
)
from lodmapper.domain.transform import create_block
from tests.helpers.lookups import make_entity, make_property

TITLE_KEY = RecordKey("item-1", "dcterms:title::P1476")
CREATOR_KEY = RecordKey("item-1", "schema:creator::P50")


def _store(feed: ChangeFeed | None = None) -> ReconciliationStore:
    store = ReconciliationStore(feed=feed)
    store.add(
        ReconciliationRecord(
            key=TITLE_KEY,
            property_id="P1476",
            datatype="monolingualtext",
            original_value="Kaart",
        )
    )
    store.add(
        ReconciliationRecord(
            key=CREATOR_KEY,
            property_id="P50",
            datatype="wikibase-item",
            original_value="Blaeu",
        )
    )
    return store


def test_confirm_entity_caps_confidence_below_certainty() -> None:
    store = _store()

    record = store.confirm(CREATOR_KEY, make_entity("Q312616", "Willem Blaeu", score=100))

    assert record.status is ReconciliationStatus.RECONCILED
    assert record.selected_match is not None
    assert record.confidence == 99
    assert record.confirmed_at is not None


def test_link_backed_entity_may_be_certain() -> None:
    store = _store()

    record = store.confirm(
        CREATOR_KEY, make_entity("Q312616"), confidence=100, link_backed=True
    )

    assert record.confidence == 100


def test_custom_value_is_certain() -> None:
    match = MatchRef(type=MatchType.CUSTOM, value="Blaeu, Willem")

    assert default_confidence(match) == 100
    assert default_confidence(make_entity("Q1", score=87.6)) == 88
    assert default_confidence(make_entity("Q1")) == 99


def test_monolingual_text_requires_language() -> None:
    store = _store()

    with pytest.raises(IncompleteMatchError):
        store.confirm(TITLE_KEY, MatchRef(type=MatchType.CUSTOM, value="Kaart"))

    record = store.confirm(
        TITLE_KEY, MatchRef(type=MatchType.CUSTOM, value="Kaart", language="nl")
    )
    assert record.is_reconciled


def test_legal_transitions_round_trip() -> None:
    feed = ChangeFeed()
    store = _store(feed)

    store.skip(CREATOR_KEY)
    store.reopen(CREATOR_KEY)
    store.confirm(CREATOR_KEY, make_entity("Q1"))
    store.confirm(CREATOR_KEY, make_entity("Q2"))
    record = store.reset(CREATOR_KEY)

    assert record.status is ReconciliationStatus.PENDING
    assert record.selected_match is None
    assert record.confidence == 0
    assert [(event.previous, event.current) for event in feed.drain()] == [
        (ReconciliationStatus.PENDING, ReconciliationStatus.SKIPPED),
        (ReconciliationStatus.SKIPPED, ReconciliationStatus.PENDING),
        (ReconciliationStatus.PENDING, ReconciliationStatus.RECONCILED),
        (ReconciliationStatus.RECONCILED, ReconciliationStatus.PENDING),
    ]


def test_last_confirmation_wins() -> None:
    store = _store()
    store.confirm(CREATOR_KEY, make_entity("Q1"))

    record = store.confirm(CREATOR_KEY, make_entity("Q2"))

    assert record.selected_match is not None
    assert record.selected_match.id == "Q2"


@pytest.mark.parametrize(
    ("prepare", "action"),
    [
        ("skip", "confirm"),
        ("skip", "skip"),
        ("none", "reopen"),
        ("none", "reset"),
        ("confirm", "skip"),
        ("confirm", "reopen"),
    ],
)
def test_illegal_transitions_raise(prepare: str, action: str) -> None:
    store = _store()
    if prepare == "skip":
        store.skip(CREATOR_KEY)
    elif prepare == "confirm":
        store.confirm(CREATOR_KEY, make_entity("Q1"))
    before = store.get(CREATOR_KEY).status

    with pytest.raises(InvalidTransitionError):
        if action == "confirm":
            store.confirm(CREATOR_KEY, make_entity("Q1"))
        else:
            getattr(store, action)(CREATOR_KEY)

    assert store.get(CREATOR_KEY).status is before


def test_reconciled_record_without_match_is_rejected() -> None:
    store = ReconciliationStore()

    with pytest.raises(IncompleteMatchError):
        store.add(
            ReconciliationRecord(
                key=TITLE_KEY,
                property_id="P1476",
                datatype="string",
                original_value="x",
                status=ReconciliationStatus.RECONCILED,
            )
        )


def test_unknown_record_and_bad_confidence() -> None:
    store = _store()

    with pytest.raises(UnknownRecordError):
        store.get(RecordKey("item-9", "x::P1"))
    with pytest.raises(ValueError, match="out of range"):
        store.confirm(CREATOR_KEY, make_entity("Q1"), confidence=101)
    with pytest.raises(ValueError, match="non-negative"):
        RecordKey("item-1", "x::P1", -1)


def test_store_matches_sorts_by_score_and_keeps_status() -> None:
    store = _store()

    record = store.store_matches(
        CREATOR_KEY,
        [make_entity("Q1", score=40), make_entity("Q2", score=90), make_entity("Q3")],
    )

    assert [match.id for match in record.matches] == ["Q2", "Q1", "Q3"]
    assert record.searched
    assert record.status is ReconciliationStatus.PENDING


def test_initialize_creates_one_record_per_value_and_keeps_existing() -> None:
    mapping_store = MappingStore()
    mapping_store.seed([MappingKey(key="schema:creator"), MappingKey(key="dcterms:title")])
    creator = mapping_store.map("schema:creator", make_property("P50", datatype="wikibase-item"))
    mapping_store.add_manual_property(
        make_property("P31", datatype="wikibase-item"), default_value="Q4006"
    )
    records = [
        {"@id": "item-a", "schema:creator": ["Blaeu", "Hondius"]},
        {"o:id": 7, "schema:creator": "Mercator"},
    ]
    store = ReconciliationStore()

    first = store.initialize(records, mapping_store)
    store.confirm(RecordKey("item-a", creator.mapping_id, 1), make_entity("Q1"))
    second = store.initialize(records, mapping_store)

    assert (first.created, first.kept) == (5, 0)
    assert (second.created, second.kept) == (0, 5)
    assert store.get(RecordKey("7", creator.mapping_id)).original_value == "Mercator"
    assert store.get(RecordKey("item-a", "manual::P31")).original_value == "Q4006"
    assert store.get(RecordKey("item-a", creator.mapping_id, 1)).is_reconciled
    assert store.progress().reconciled == 1


def test_rekey_and_discard_mapping() -> None:
    store = _store()
    store.confirm(CREATOR_KEY, make_entity("Q1"))

    moved = store.rekey_mapping("schema:creator::P50", "schema:creator::P50::o:label")

    new_key = RecordKey("item-1", "schema:creator::P50::o:label")
    assert moved == 1
    assert store.get(new_key).is_reconciled
    assert CREATOR_KEY not in store
    assert [record.key for record in store.records_for_mapping(new_key.mapping_id)] == [new_key]
    assert store.discard_mapping("dcterms:title::P1476") == 1
    assert len(store) == 1


def test_progress_counts() -> None:
    store = _store()
    store.skip(TITLE_KEY)

    progress = store.progress()

    assert (progress.total, progress.reconciled, progress.skipped) == (2, 0, 1)
    assert progress.pending == 1
    assert progress.ratio == 0.5


def test_records_for_item_lists_that_item_only() -> None:
    store = _store()
    store.add(
        ReconciliationRecord(
            key=RecordKey("item-2", "schema:creator::P50"),
            property_id="P50",
            datatype="wikibase-item",
            original_value="Hondius",
        )
    )

    records = store.records_for("item-1")

    assert [record.key for record in records] == [TITLE_KEY, CREATOR_KEY]
    assert store.records_for("item-9") == []


def test_status_events_are_published_on_change_only() -> None:
    feed = ChangeFeed()
    store = _store(feed)
    seen: list[RecordStatusChanged] = []
    feed.subscribe(RecordStatusChanged, seen.append)

    store.confirm(CREATOR_KEY, make_entity("Q1"))
    store.confirm(CREATOR_KEY, make_entity("Q2"))

    assert len(seen) == 1


def _creator_mapping() -> tuple[MappingStore, str]:
    mapping_store = MappingStore()
    mapping_store.seed([MappingKey(key="schema:creator")])
    creator = mapping_store.map("schema:creator", make_property("P50", datatype="wikibase-item"))
    return mapping_store, creator.mapping_id


def test_initialize_rederives_pending_values_after_pipeline_edit() -> None:
    mapping_store, creator_id = _creator_mapping()
    records = [
        {"@id": "item-a", "schema:creator": ["Blaeu", "Hondius"]},
        {"@id": "item-b", "schema:creator": "Mercator"},
    ]
    store = ReconciliationStore()
    store.initialize(records, mapping_store)
    confirmed = RecordKey("item-b", creator_id)
    store.confirm(confirmed, make_entity("Q1"))
    store.store_matches(RecordKey("item-a", creator_id), [make_entity("Q2")])

    mapping_store.add_block(creator_id, create_block("prefix", text="X-"))
    summary = store.initialize(records, mapping_store)

    first = store.get(RecordKey("item-a", creator_id))
    assert first.original_value == "X-Blaeu"
    assert (first.matches, first.searched) == ([], False)
    assert store.get(RecordKey("item-a", creator_id, 1)).original_value == "X-Hondius"
    assert store.get(confirmed).original_value == "Mercator"
    assert store.get(confirmed).is_reconciled
    assert (summary.created, summary.kept, summary.refreshed, summary.dropped) == (0, 3, 2, 0)


def test_initialize_drops_pending_records_whose_value_is_gone() -> None:
    mapping_store, creator_id = _creator_mapping()
    store = ReconciliationStore()
    store.initialize(
        [
            {"@id": "item-a", "schema:creator": ["Blaeu", "Hondius"]},
            {"@id": "item-b", "schema:creator": "Mercator"},
        ],
        mapping_store,
    )
    store.skip(RecordKey("item-b", creator_id))

    summary = store.initialize(
        [{"@id": "item-a", "schema:creator": ["Blaeu"]}, {"@id": "item-b"}], mapping_store
    )

    assert RecordKey("item-a", creator_id, 1) not in store
    assert store.get(RecordKey("item-b", creator_id)).status is ReconciliationStatus.SKIPPED
    assert (summary.kept, summary.dropped) == (1, 1)


def test_refresh_mapping_leaves_other_mappings_alone() -> None:
    mapping_store, creator_id = _creator_mapping()
    mapping_store.seed([MappingKey(key="dcterms:title")])
    title = mapping_store.map("dcterms:title", make_property("P1476"))
    records = [{"@id": "item-a", "schema:creator": "Blaeu", "dcterms:title": "Kaart"}]
    store = ReconciliationStore()
    store.initialize(records, mapping_store)
    mapping_store.add_block(title.mapping_id, create_block("suffix", text="!"))
    mapping_store.add_block(creator_id, create_block("prefix", text="by "))

    summary = store.refresh_mapping(records, mapping_store, creator_id)

    assert store.get(RecordKey("item-a", creator_id)).original_value == "by Blaeu"
    assert store.get(RecordKey("item-a", title.mapping_id)).original_value == "Kaart"
    assert summary.refreshed == 1
