"""Candidate values a mapping yields for one record."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.analysis.values import get_value_by_path, value_to_string
from lodmapper.domain.model import record_values
from lodmapper.domain.transform import PipelineResult, apply

if TYPE_CHECKING:
    from collections.abc import Sequence

    from lodmapper.domain.model import (
        JsonObject,
        ManualProperty,
        PropertyMapping,
        TransformationBlock,
    )

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CandidateValue:
    value_index: int
    raw_value: object
    result: PipelineResult
    language: str | None = None

    @property
    def value(self) -> str:
        return self.result.value

    @property
    def incomplete(self) -> bool:
        return self.result.incomplete


def _source_language(raw: object) -> str | None:
    if isinstance(raw, Mapping):
        language = raw.get("@language")
        if isinstance(language, str) and language:
            return language.lower()
    return None


def extract_property_values(
    record: JsonObject,
    mapping: PropertyMapping,
    blocks: Sequence[TransformationBlock] = (),
) -> list[CandidateValue]:
    """Run ``blocks`` over every value ``record`` holds for the mapped key.

    With a sub-field selected, values lacking that sub-field are skipped. The
    value index always counts positions in the source array, so indexes stay
    stable when the sub-field changes.
    """

    candidates: list[CandidateValue] = []
    for index, raw in enumerate(record_values(record, mapping.key)):
        selected = raw
        if mapping.subfield:
            selected = get_value_by_path(raw, mapping.subfield)
            if selected is None:
                log.debug("Value %d of %s has no %s", index, mapping.key, mapping.subfield)
                continue
        result = apply(blocks, selected, source=record)
        if not result.value.strip():
            continue
        candidates.append(
            CandidateValue(
                value_index=index,
                raw_value=raw,
                result=result,
                language=result.language or _source_language(raw),
            )
        )
    return candidates


def manual_property_value(manual: ManualProperty) -> CandidateValue | None:
    """The default value of a manual property, applied to every item."""

    if manual.default_value is None:
        return None
    text = value_to_string(manual.default_value)
    if not text.strip():
        return None
    return CandidateValue(
        value_index=0,
        raw_value=manual.default_value,
        result=PipelineResult(value=text, steps=()),
        language=_source_language(manual.default_value),
    )
