"""Working copy of one value while the user reconciles it.

A :class:`ValueDraft` restores what was confirmed before (value, language,
datatype), lets the user edit or pick an entity, and turns the result into a
confirmation. Missing required input comes back as :class:`Incomplete`;
validation issues are advisory and travel along as record warnings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.model import (
    CERTAIN_CONFIDENCE,
    MatchRef,
    MatchType,
    ValueKind,
    find_language,
)

from .kinds import value_kind_for
from .validators import UNSUPPORTED_DATATYPE, ValidationReport, validate

if TYPE_CHECKING:
    from lodmapper.config import ReconciliationConfig
    from lodmapper.domain.model import PropertyRef, ReconciliationRecord, RecordKey

    from .records import ReconciliationStore

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Confirmed:
    record: ReconciliationRecord
    warnings: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class Incomplete:
    reasons: tuple[str, ...]


type ConfirmOutcome = Confirmed | Incomplete


@dataclass(slots=True, kw_only=True)
class ValueDraft:
    key: RecordKey
    property: PropertyRef
    kind: ValueKind
    original_value: str
    original_language: str | None = None
    value: str
    language: str | None = None
    datatype: str
    selected_entity: MatchRef | None = None
    edited: bool = False
    config: ReconciliationConfig | None = field(default=None, repr=False)

    def edit(self, value: str) -> None:
        self.value = value
        self.edited = value != self.original_value

    def set_language(self, code: str | None) -> None:
        self.language = code.strip().lower() if code and code.strip() else None

    def select_entity(self, match: MatchRef) -> None:
        if match.type is not MatchType.ENTITY:
            raise ValueError("Only entity matches can be selected")
        self.selected_entity = match

    def reset(self) -> None:
        """Back to the raw input; whatever the store holds stays confirmed."""

        self.value = self.original_value
        self.language = self.original_language
        self.selected_entity = None
        self.edited = False

    def validation(self) -> ValidationReport:
        if self.kind is ValueKind.ENTITY:
            entity_id = self.selected_entity.id if self.selected_entity else ""
            return validate(self.kind, entity_id or "", self.property, config=self.config)
        return validate(
            self.kind,
            self.value,
            self.property,
            language=self.language,
            config=self.config,
        )

    def confirm(self, store: ReconciliationStore) -> ConfirmOutcome:
        entity = self.selected_entity
        if self.kind is ValueKind.ENTITY and entity is None:
            return Incomplete(reasons=("no_entity_selected",))

        report = self.validation()
        if not report.can_confirm:
            return Incomplete(reasons=tuple(issue.code for issue in report.blocking))

        warnings = report.warning_codes()
        if self.kind is ValueKind.ENTITY and entity is not None:
            match = MatchRef(
                type=MatchType.ENTITY,
                id=entity.id,
                label=entity.label,
                description=entity.description,
                datatype=self.datatype,
                url=entity.url,
                score=entity.score,
                types=entity.types,
            )
            record = store.confirm(self.key, match, warnings=warnings)
        else:
            language = find_language(self.language) if self.language else None
            match = MatchRef(
                type=MatchType.CUSTOM,
                value=self.value,
                language=self.language,
                language_label=language.label if language else None,
                datatype=self.datatype,
                url=report.canonical_url,
                precision=report.precision,
            )
            record = store.confirm(
                self.key, match, confidence=CERTAIN_CONFIDENCE, warnings=warnings
            )
        if UNSUPPORTED_DATATYPE in warnings:
            log.info("Confirmed %s with unsupported datatype %s", self.key, self.datatype)
        return Confirmed(record=record, warnings=warnings)


def open_draft(
    store: ReconciliationStore,
    key: RecordKey,
    prop: PropertyRef,
    *,
    config: ReconciliationConfig | None = None,
) -> ValueDraft:
    """Open ``key`` for editing, restoring a previous confirmation exactly."""

    record = store.get(key)
    datatype = prop.datatype or record.datatype
    draft = ValueDraft(
        key=key,
        property=prop,
        kind=value_kind_for(datatype),
        original_value=record.original_value,
        original_language=record.source_language,
        value=record.original_value,
        language=record.source_language,
        datatype=datatype,
        config=config,
    )
    match = record.selected_match
    if match is None:
        return draft

    draft.datatype = match.datatype or datatype
    draft.kind = value_kind_for(draft.datatype)
    draft.language = match.language
    if match.type is MatchType.ENTITY:
        draft.selected_entity = match
    else:
        draft.value = match.value or ""
        draft.edited = draft.value != record.original_value
    return draft
