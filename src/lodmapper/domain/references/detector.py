"""Reference URL detection over source records.

Three fixed families are recognized per record: the record's own API URL
(back-link), WorldCat OCLC links in ``schema:sameAs`` (bibliographic) and ARK
identifiers in ``dcterms:identifier`` (persistent-id, resolved via n2t.net).
Only the first hit per family and record counts. Detection is a pure function
of its input.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from lodmapper.domain.model import (
    MAX_SUMMARY_EXAMPLES,
    Reference,
    ReferenceSummary,
    ReferenceType,
    normalize_records,
    record_item_id,
)

if TYPE_CHECKING:
    from lodmapper.domain.model import JsonObject

log = getLogger(__name__)

OCLC_RE: Final = re.compile(r"worldcat\.org/oclc/(\d+)", re.IGNORECASE)
ARK_RE: Final = re.compile(r"^ark:[\\/]?[0-9]+[\\/][0-9a-zA-Z._\-]+", re.IGNORECASE)
ARK_RESOLVER: Final = "https://n2t.net/"

DETECTED_TYPES: Final[tuple[ReferenceType, ...]] = (
    ReferenceType.BACK_LINK,
    ReferenceType.BIBLIOGRAPHIC,
    ReferenceType.PERSISTENT_ID,
)


@dataclass(slots=True, frozen=True)
class DetectionResult:
    item_references: dict[str, tuple[Reference, ...]]
    summary: dict[ReferenceType, ReferenceSummary]

    def references_for(self, item_id: str) -> tuple[Reference, ...]:
        return self.item_references.get(item_id, ())


def _value_list(record: JsonObject, key: str) -> list[object]:
    raw = record.get(key)
    if raw is None:
        return []
    return raw if isinstance(raw, list) else [raw]


def _back_link(record: JsonObject, item_id: str) -> Reference | None:
    url = record.get("@id")
    if isinstance(url, str) and "/items/" in url:
        return Reference(type=ReferenceType.BACK_LINK, url=url, item_id=item_id)
    return None


def _oclc_link(record: JsonObject, item_id: str) -> Reference | None:
    for entry in _value_list(record, "schema:sameAs"):
        url = entry.get("@id") if isinstance(entry, Mapping) else entry
        if isinstance(url, str) and OCLC_RE.search(url):
            return Reference(type=ReferenceType.BIBLIOGRAPHIC, url=url, item_id=item_id)
    return None


def _ark_link(record: JsonObject, item_id: str) -> Reference | None:
    for entry in _value_list(record, "dcterms:identifier"):
        value = entry.get("@value") if isinstance(entry, Mapping) else entry
        if not isinstance(value, str):
            continue
        match = ARK_RE.match(value.strip())
        if match:
            return Reference(
                type=ReferenceType.PERSISTENT_ID,
                url=f"{ARK_RESOLVER}{match.group(0)}",
                item_id=item_id,
            )
    return None


_DETECTORS = (_back_link, _oclc_link, _ark_link)


def detect_record(record: JsonObject, item_id: str) -> list[Reference]:
    references: list[Reference] = []
    for detector in _DETECTORS:
        reference = detector(record, item_id)
        if reference is not None:
            references.append(reference)
    return references


def detect(records: object) -> DetectionResult:
    """Detect references in every record and summarize them per type."""

    item_references: dict[str, tuple[Reference, ...]] = {}
    counts = dict.fromkeys(DETECTED_TYPES, 0)
    examples: dict[ReferenceType, list[Reference]] = {kind: [] for kind in DETECTED_TYPES}

    for index, record in enumerate(normalize_records(records)):
        item_id = record_item_id(record, index)
        found = detect_record(record, item_id)
        if not found:
            continue
        item_references[item_id] = tuple(found)
        for reference in found:
            counts[reference.type] += 1
            bucket = examples[reference.type]
            if len(bucket) < MAX_SUMMARY_EXAMPLES:
                bucket.append(reference)

    summary = {
        kind: ReferenceSummary(count=counts[kind], examples=tuple(examples[kind]))
        for kind in DETECTED_TYPES
        if counts[kind]
    }
    log.info(
        "Detected references: %s",
        ", ".join(f"{kind}={entry.count}" for kind, entry in summary.items()) or "none",
    )
    return DetectionResult(item_references=item_references, summary=summary)
