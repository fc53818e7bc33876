"""The explicit application state shared by all engine operations.

A :class:`Session` owns one store per concern and wires them together through a
single :class:`ChangeFeed`. Renamed mappings re-key their reconciliation
records and edited pipelines re-derive the pending ones; removed mappings drop
their records.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.events import BlocksChanged, ChangeFeed, MappingIdChanged, MappingRemoved
from lodmapper.domain.mapping import MappingStore
from lodmapper.domain.model import normalize_records
from lodmapper.domain.reconciliation import ReconciliationStore
from lodmapper.domain.references import ReferenceStore, detect

if TYPE_CHECKING:
    from collections.abc import Callable

    from lodmapper.domain.mapping import MappingSnapshot
    from lodmapper.domain.model import JsonObject, ReconciliationProgress, ReconciliationRecord
    from lodmapper.domain.references import SummaryEntry

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SessionState:
    """Read-only view of a session for rendering code."""

    item_count: int
    mapping: MappingSnapshot
    records: tuple[ReconciliationRecord, ...]
    progress: ReconciliationProgress
    references: tuple[SummaryEntry, ...]
    assignments: dict[str, frozenset[str]]


class Session:
    def __init__(self, *, feed: ChangeFeed | None = None) -> None:
        self.feed = feed if feed is not None else ChangeFeed()
        self.mapping = MappingStore(feed=self.feed)
        self.reconciliation = ReconciliationStore(feed=self.feed)
        self.references = ReferenceStore(feed=self.feed)
        self._records: list[JsonObject] = []
        # set once records exist, so later edits keep them in step
        self._reconciling = False
        self.feed.subscribe(MappingIdChanged, self._on_mapping_id_changed)
        self.feed.subscribe(BlocksChanged, self._on_blocks_changed)
        self.feed.subscribe(MappingRemoved, self._on_mapping_removed)

    @property
    def records(self) -> list[JsonObject]:
        return list(self._records)

    def load_records(self, data: object) -> list[JsonObject]:
        """Replace the source records and re-run reference detection."""

        self._records = normalize_records(data)
        self.references.load_detection(detect(self._records))
        log.info("Session holds %d records", len(self._records))
        return self.records

    def initialize_reconciliation(self) -> None:
        self.reconciliation.initialize(self._records, self.mapping)
        self._reconciling = True

    def get_state(self) -> SessionState:
        return SessionState(
            item_count=len(self._records),
            mapping=self.mapping.snapshot(),
            records=self.reconciliation.snapshot(),
            progress=self.reconciliation.progress(),
            references=tuple(self.references.summary_entries()),
            assignments=self.references.assignments(),
        )

    def update_state[T](self, change: Callable[[Session], T]) -> T:
        """Apply ``change`` synchronously; returns whatever it returns."""

        result = change(self)
        events = self.feed.drain()
        if events:
            log.debug("State update produced %d change events", len(events))
        return result

    def _refresh_records(self, mapping_id: str) -> None:
        if self._reconciling:
            self.reconciliation.refresh_mapping(self._records, self.mapping, mapping_id)

    def _on_mapping_id_changed(self, event: MappingIdChanged) -> None:
        self.reconciliation.rekey_mapping(event.old_id, event.new_id)
        self._refresh_records(event.new_id)

    def _on_blocks_changed(self, event: BlocksChanged) -> None:
        self._refresh_records(event.mapping_id)

    def _on_mapping_removed(self, event: MappingRemoved) -> None:
        dropped = self.reconciliation.discard_mapping(event.mapping_id)
        if dropped:
            log.debug("Dropped %d records of removed mapping %s", dropped, event.mapping_id)
