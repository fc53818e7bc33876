"""Reconciliation records and their state machine.

Legal transitions::

    pending    -> reconciled | skipped
    reconciled -> reconciled   (re-confirmation)
    reconciled -> pending      (reset)
    skipped    -> pending      (reopen)

Anything else raises :class:`InvalidTransitionError`. A reconciled record always
holds a selected match.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.events import ChangeFeed, RecordStatusChanged
from lodmapper.domain.mapping.values import extract_property_values, manual_property_value
from lodmapper.domain.model import (
    CERTAIN_CONFIDENCE,
    MatchType,
    ReconciliationProgress,
    ReconciliationRecord,
    ReconciliationStatus,
    RecordKey,
    normalize_records,
    record_item_id,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lodmapper.domain.mapping import MappingStore
    from lodmapper.domain.mapping.values import CandidateValue
    from lodmapper.domain.model import MatchRef, PropertyRef

log = getLogger(__name__)

_MONOLINGUAL_DATATYPE = "monolingualtext"
_MAX_MATCH_CONFIDENCE = CERTAIN_CONFIDENCE - 1


class InvalidTransitionError(RuntimeError):
    def __init__(
        self,
        key: RecordKey,
        current: ReconciliationStatus,
        target: ReconciliationStatus,
    ) -> None:
        super().__init__(f"{key}: cannot go from {current} to {target}")
        self.key = key
        self.current = current
        self.target = target


class IncompleteMatchError(ValueError):
    """Raised when a match lacks data its record's datatype requires."""


class UnknownRecordError(KeyError):
    pass


@dataclass(slots=True, kw_only=True, frozen=True)
class InitializeSummary:
    created: int = 0
    kept: int = 0
    # pending records whose value changed with the current pipeline
    refreshed: int = 0
    # pending records whose candidate value no longer exists
    dropped: int = 0


def default_confidence(match: MatchRef) -> int:
    """Custom values are certain; entity matches stay below certainty."""

    if match.type is MatchType.CUSTOM:
        return CERTAIN_CONFIDENCE
    if match.score is None:
        return _MAX_MATCH_CONFIDENCE
    return max(0, min(round(match.score), _MAX_MATCH_CONFIDENCE))


def _refresh(record: ReconciliationRecord, candidate: CandidateValue) -> bool:
    if (record.original_value, record.source_language) == (candidate.value, candidate.language):
        return False
    record.original_value = candidate.value
    record.source_language = candidate.language
    # candidates found for the old value do not apply any more
    record.matches = []
    record.searched = False
    return True


class ReconciliationStore:
    def __init__(self, *, feed: ChangeFeed | None = None) -> None:
        self.feed = feed if feed is not None else ChangeFeed()
        self._records: dict[RecordKey, ReconciliationRecord] = {}

    def initialize(self, records: object, mapping_store: MappingStore) -> InitializeSummary:
        """Create pending records for every candidate value of every mapping.

        Pending records are re-derived from the current pipeline, and pending
        records whose candidate value is gone are dropped. Reconciled and
        skipped records are kept as they are.
        """

        summary = self._sync(records, mapping_store)
        log.info(
            "Reconciliation records: %d created, %d kept, %d refreshed, %d dropped",
            summary.created,
            summary.kept,
            summary.refreshed,
            summary.dropped,
        )
        return summary

    def refresh_mapping(
        self, records: object, mapping_store: MappingStore, mapping_id: str
    ) -> InitializeSummary:
        """Re-derive the records of one mapping after its sub-field or blocks changed."""

        summary = self._sync(records, mapping_store, only=mapping_id)
        if summary.refreshed or summary.dropped or summary.created:
            log.debug("Refreshed records of %s: %s", mapping_id, summary)
        return summary

    def _sync(
        self,
        records: object,
        mapping_store: MappingStore,
        *,
        only: str | None = None,
    ) -> InitializeSummary:
        mappings = [
            mapping
            for mapping in mapping_store.mappings()
            if only is None or mapping.mapping_id == only
        ]
        manual = [
            entry
            for entry in mapping_store.manual_properties()
            if only is None or entry.mapping_id == only
        ]
        scope = {mapping.mapping_id for mapping in mappings}
        scope.update(entry.mapping_id for entry in manual)

        wanted: dict[RecordKey, tuple[PropertyRef, CandidateValue]] = {}
        for index, record in enumerate(normalize_records(records)):
            item_id = record_item_id(record, index)
            for mapping in mappings:
                blocks = mapping_store.get_transformation_blocks(mapping.mapping_id)
                for candidate in extract_property_values(record, mapping, blocks):
                    key = RecordKey(item_id, mapping.mapping_id, candidate.value_index)
                    wanted[key] = (mapping.property, candidate)
            for entry in manual:
                candidate = manual_property_value(entry)
                if candidate is not None:
                    wanted[RecordKey(item_id, entry.mapping_id, 0)] = (entry.property, candidate)

        created = 0
        kept = 0
        refreshed = 0
        for key, (prop, candidate) in wanted.items():
            existing = self._records.get(key)
            if existing is None:
                self._records[key] = ReconciliationRecord(
                    key=key,
                    property_id=prop.id,
                    datatype=prop.datatype,
                    original_value=candidate.value,
                    source_language=candidate.language,
                )
                created += 1
                continue
            kept += 1
            if existing.status is ReconciliationStatus.PENDING and _refresh(existing, candidate):
                refreshed += 1

        stale = [
            key
            for key, record in self._records.items()
            if key.mapping_id in scope
            and key not in wanted
            and record.status is ReconciliationStatus.PENDING
        ]
        for key in stale:
            del self._records[key]
        return InitializeSummary(
            created=created, kept=kept, refreshed=refreshed, dropped=len(stale)
        )

    def add(self, record: ReconciliationRecord) -> None:
        if record.is_reconciled and record.selected_match is None:
            raise IncompleteMatchError(f"{record.key}: reconciled without a match")
        self._records[record.key] = record

    def get(self, key: RecordKey) -> ReconciliationRecord:
        try:
            return self._records[key]
        except KeyError as exc:
            raise UnknownRecordError(key) from exc

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    def all(self) -> list[ReconciliationRecord]:
        return list(self._records.values())

    def records_for(self, item_id: str) -> list[ReconciliationRecord]:
        return [record for key, record in self._records.items() if key.item_id == item_id]

    def records_for_mapping(self, mapping_id: str) -> list[ReconciliationRecord]:
        return [record for key, record in self._records.items() if key.mapping_id == mapping_id]

    # ---------------------------------------------------------- transitions

    def _transition(self, record: ReconciliationRecord, target: ReconciliationStatus) -> None:
        previous = record.status
        record.status = target
        if previous is not target:
            self.feed.publish(RecordStatusChanged(record.key, previous, target))

    def confirm(
        self,
        key: RecordKey,
        match: MatchRef,
        *,
        confidence: int | None = None,
        warnings: Iterable[str] = (),
        link_backed: bool = False,
    ) -> ReconciliationRecord:
        """Store ``match`` as the record's value; the last confirmation wins."""

        record = self.get(key)
        if record.status is ReconciliationStatus.SKIPPED:
            raise InvalidTransitionError(key, record.status, ReconciliationStatus.RECONCILED)
        if record.datatype == _MONOLINGUAL_DATATYPE and not match.language:
            raise IncompleteMatchError(f"{key}: monolingual text needs a language")

        resolved = default_confidence(match) if confidence is None else confidence
        if not 0 <= resolved <= CERTAIN_CONFIDENCE:
            raise ValueError(f"Confidence out of range: {resolved}")
        if match.type is MatchType.ENTITY and not link_backed:
            resolved = min(resolved, _MAX_MATCH_CONFIDENCE)

        record.selected_match = match
        record.confidence = resolved
        record.warnings = tuple(warnings)
        record.confirmed_at = datetime.now(UTC)
        self._transition(record, ReconciliationStatus.RECONCILED)
        log.debug("Confirmed %s (%s, confidence %d)", key, match.type, resolved)
        return record

    def skip(self, key: RecordKey) -> ReconciliationRecord:
        record = self.get(key)
        if record.status is not ReconciliationStatus.PENDING:
            raise InvalidTransitionError(key, record.status, ReconciliationStatus.SKIPPED)
        self._transition(record, ReconciliationStatus.SKIPPED)
        return record

    def reopen(self, key: RecordKey) -> ReconciliationRecord:
        record = self.get(key)
        if record.status is not ReconciliationStatus.SKIPPED:
            raise InvalidTransitionError(key, record.status, ReconciliationStatus.PENDING)
        self._transition(record, ReconciliationStatus.PENDING)
        return record

    def reset(self, key: RecordKey) -> ReconciliationRecord:
        """Drop the confirmation of a reconciled record."""

        record = self.get(key)
        if record.status is not ReconciliationStatus.RECONCILED:
            raise InvalidTransitionError(key, record.status, ReconciliationStatus.PENDING)
        record.selected_match = None
        record.confidence = 0
        record.warnings = ()
        record.confirmed_at = None
        self._transition(record, ReconciliationStatus.PENDING)
        return record

    def store_matches(self, key: RecordKey, matches: Iterable[MatchRef]) -> ReconciliationRecord:
        """Replace the candidate list, best score first. Status is left alone."""

        record = self.get(key)
        record.matches = sorted(matches, key=lambda match: match.score or 0.0, reverse=True)
        record.searched = True
        return record

    # -------------------------------------------------------------- mapping

    def rekey_mapping(self, old_id: str, new_id: str) -> int:
        """Move every record of mapping ``old_id`` under ``new_id``."""

        moved = 0
        for key in [key for key in self._records if key.mapping_id == old_id]:
            record = self._records.pop(key)
            new_key = RecordKey(key.item_id, new_id, key.value_index)
            self._records[new_key] = replace(record, key=new_key)
            moved += 1
        if moved:
            log.debug("Re-keyed %d records from %s to %s", moved, old_id, new_id)
        return moved

    def discard_mapping(self, mapping_id: str) -> int:
        keys = [key for key in self._records if key.mapping_id == mapping_id]
        for key in keys:
            del self._records[key]
        return len(keys)

    def progress(self) -> ReconciliationProgress:
        reconciled = 0
        skipped = 0
        for record in self._records.values():
            if record.status is ReconciliationStatus.RECONCILED:
                reconciled += 1
            elif record.status is ReconciliationStatus.SKIPPED:
                skipped += 1
        return ReconciliationProgress(
            total=len(self._records), reconciled=reconciled, skipped=skipped
        )

    def snapshot(self) -> tuple[ReconciliationRecord, ...]:
        return tuple(
            replace(record, matches=list(record.matches)) for record in self._records.values()
        )
