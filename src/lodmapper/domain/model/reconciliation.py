"""Reconciliation records and the matches they hold."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import MatchType, ReconciliationStatus

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import TimePrecision

# Reserved for values the user typed in or that already link to an entity
CERTAIN_CONFIDENCE = 100


@dataclass(slots=True, frozen=True)
class RecordKey:
    item_id: str
    mapping_id: str
    value_index: int = 0

    def __post_init__(self) -> None:
        if self.value_index < 0:
            raise ValueError("value_index must be non-negative")


@dataclass(slots=True, kw_only=True, frozen=True)
class MatchRef:
    """A candidate or confirmed reconciliation result.

    Entity matches carry the target ``id``; custom matches carry a literal
    ``value``. Anything else is rejected at construction.
    """

    type: MatchType
    id: str | None = None
    label: str | None = None
    description: str | None = None
    value: str | None = None
    language: str | None = None
    language_label: str | None = None
    datatype: str | None = None
    url: str | None = None
    score: float | None = None
    precision: TimePrecision | None = None
    types: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.type is MatchType.ENTITY and not self.id:
            raise ValueError("Entity match must carry an id")
        if self.type is MatchType.CUSTOM and self.value is None:
            raise ValueError("Custom match must carry a value")

    @property
    def display_value(self) -> str:
        if self.type is MatchType.ENTITY:
            return self.label or self.id or ""
        return self.value or ""


@dataclass(slots=True, kw_only=True)
class ReconciliationRecord:
    key: RecordKey
    property_id: str
    datatype: str
    original_value: str
    # language carried by the source value or a language block
    source_language: str | None = None
    status: ReconciliationStatus = ReconciliationStatus.PENDING
    selected_match: MatchRef | None = None
    matches: list[MatchRef] = field(default_factory=list)
    # set once a lookup ran, so an empty ``matches`` list means "nothing found"
    searched: bool = False
    confidence: int = 0
    warnings: tuple[str, ...] = ()
    confirmed_at: datetime | None = None

    @property
    def is_reconciled(self) -> bool:
        return self.status is ReconciliationStatus.RECONCILED


@dataclass(slots=True, kw_only=True, frozen=True)
class ReconciliationProgress:
    total: int
    reconciled: int
    skipped: int

    @property
    def pending(self) -> int:
        return self.total - self.reconciled - self.skipped

    @property
    def completed(self) -> int:
        return self.reconciled + self.skipped

    @property
    def ratio(self) -> float:
        if self.total == 0:
            return 1.0
        return self.completed / self.total
