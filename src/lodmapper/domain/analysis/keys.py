"""Key analysis over a fetched record set."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.model import KeyCategory, MappingKey, ValueType, normalize_records

from .context import context_prefixes, linked_data_uri
from .identifiers import classify
from .ignore import IgnoreRules
from .values import extract_sample_value, infer_value_type

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)


@dataclass(slots=True)
class _KeyStats:
    first_seen: int
    frequency: int = 0
    sample: object = None
    has_sample: bool = False
    types: Counter[ValueType] = field(default_factory=Counter)
    type_order: list[ValueType] = field(default_factory=list)

    def observe(self, value: object) -> None:
        self.frequency += 1
        if not self.has_sample and value is not None:
            sample = extract_sample_value(value)
            if sample is not None:
                self.sample = sample
                self.has_sample = True
        inferred = infer_value_type(value)
        if inferred is None:
            return
        if inferred not in self.types:
            self.type_order.append(inferred)
        self.types[inferred] += 1

    def majority_type(self) -> ValueType:
        if not self.types:
            return ValueType.STRING
        best = max(self.types.values())
        # ties go to the type seen first
        return next(value_type for value_type in self.type_order if self.types[value_type] == best)


def analyze(
    data: object,
    *,
    ignore_rules: IgnoreRules | None = None,
    context: Mapping[str, str] | None = None,
) -> list[MappingKey]:
    """Compute per-key statistics for every content key across ``data``.

    ``data`` may be a list of records, an ``{"items": [...]}`` wrapper or a single
    record. ``@``-prefixed JSON-LD keys are skipped. Keys matched by
    ``ignore_rules`` come back already categorized as ignored. The result is
    sorted by frequency, highest first, ties in first-seen order.
    """

    records = normalize_records(data)
    rules = ignore_rules or IgnoreRules()

    prefixes: dict[str, str] = {}
    if records:
        prefixes.update(context_prefixes(records[0].get("@context")))
    if context:
        prefixes.update(context)

    stats: dict[str, _KeyStats] = {}
    for record in records:
        for key, value in record.items():
            if not isinstance(key, str) or key.startswith("@"):
                continue
            entry = stats.get(key)
            if entry is None:
                entry = stats[key] = _KeyStats(first_seen=len(stats))
            entry.observe(value)

    keys: list[MappingKey] = []
    for key, entry in stats.items():
        ignored = rules.matches(key)
        keys.append(
            MappingKey(
                key=key,
                sample_value=entry.sample,
                frequency=entry.frequency,
                total_items=len(records),
                category=KeyCategory.IGNORED if ignored else KeyCategory.NON_LINKED,
                value_type=entry.majority_type(),
                type_counts=dict(entry.types),
                ambiguous_type=len(entry.types) > 1,
                linked_data_uri=linked_data_uri(key, prefixes),
                identifier=classify(key, entry.sample),
            )
        )

    keys.sort(key=lambda mapping_key: -mapping_key.frequency)
    ambiguous = sum(1 for mapping_key in keys if mapping_key.ambiguous_type)
    log.info(
        "Analyzed %d records: keys=%d, ignored=%d, ambiguous=%d",
        len(records),
        len(keys),
        sum(1 for mapping_key in keys if mapping_key.category is KeyCategory.IGNORED),
        ambiguous,
    )
    return keys
