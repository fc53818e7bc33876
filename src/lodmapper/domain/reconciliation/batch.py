"""Batch operations over many reconciliation records."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.model import (
    CERTAIN_CONFIDENCE,
    MatchRef,
    MatchType,
    ReconciliationStatus,
    ValueKind,
)

from .kinds import value_kind_for
from .matching import rank_matches
from .validators import UNREACHABLE_URL, probe_url

if TYPE_CHECKING:
    from collections.abc import Mapping

    from lodmapper.domain.model import PropertyRef, ReconciliationRecord, RecordKey
    from lodmapper.domain.ports import EntitySearcher, UrlProbe

    from .records import ReconciliationStore

log = getLogger(__name__)

_ENTITY_LINK_RE = re.compile(r"^(?:https?://(?:www\.)?wikidata\.org/(?:wiki|entity)/)?(Q\d+)$")
ENTITY_URL_TEMPLATE = "https://www.wikidata.org/wiki/{id}"


@dataclass(slots=True, kw_only=True, frozen=True)
class SuggestFailure:
    query: str
    message: str
    keys: tuple[RecordKey, ...]


@dataclass(slots=True, kw_only=True, frozen=True)
class SuggestSummary:
    searched: int = 0
    updated: int = 0
    failures: tuple[SuggestFailure, ...] = ()


def linked_entity_id(value: str) -> str | None:
    """Entity id when ``value`` already is a knowledge-base entity link or id."""

    match = _ENTITY_LINK_RE.match(value.strip())
    return match.group(1) if match else None


async def suggest_matches(
    store: ReconciliationStore,
    searcher: EntitySearcher,
    *,
    properties: Mapping[str, PropertyRef] | None = None,
    language: str = "en",
    limit: int = 10,
    refresh: bool = False,
) -> SuggestSummary:
    """Pre-fetch entity candidates for pending entity records.

    Identical queries (same value, same type filter) are searched once and
    shared. A failed search is reported and leaves its records unsearched.
    """

    groups: dict[tuple[str, tuple[str, ...]], list[ReconciliationRecord]] = {}
    for record in store.all():
        if record.status is not ReconciliationStatus.PENDING:
            continue
        if value_kind_for(record.datatype) is not ValueKind.ENTITY:
            continue
        if record.searched and not refresh:
            continue
        prop = properties.get(record.property_id) if properties else None
        type_ids = prop.constraints.value_type_classes() if prop else ()
        groups.setdefault((record.original_value.strip(), type_ids), []).append(record)

    if not groups:
        return SuggestSummary()

    queries = list(groups)
    results = await asyncio.gather(
        *(
            searcher.search_entities(query, language=language, limit=limit, type_ids=type_ids)
            for query, type_ids in queries
        ),
        return_exceptions=True,
    )

    updated = 0
    failures: list[SuggestFailure] = []
    for (query, type_ids), result in zip(queries, results, strict=True):
        records = groups[(query, type_ids)]
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            log.warning("Entity search for %r failed: %s", query, result)
            failures.append(
                SuggestFailure(
                    query=query,
                    message=str(result),
                    keys=tuple(record.key for record in records),
                )
            )
            continue
        for record in records:
            current = store.get(record.key) if record.key in store else None
            if current is None or current.original_value.strip() != query:
                # re-keyed, discarded or re-derived while the search was running
                log.debug("Record %s changed, dropping its candidates", record.key)
                continue
            prop = properties.get(record.property_id) if properties else None
            matches = rank_matches(result, prop, query) if prop else result
            store.store_matches(record.key, matches)
            updated += 1

    return SuggestSummary(searched=len(queries), updated=updated, failures=tuple(failures))


def confirm_link_backed(store: ReconciliationStore) -> int:
    """Confirm pending entity values that already link to an entity."""

    confirmed = 0
    for record in store.all():
        if record.status is not ReconciliationStatus.PENDING:
            continue
        if value_kind_for(record.datatype) is not ValueKind.ENTITY:
            continue
        entity_id = linked_entity_id(record.original_value)
        if entity_id is None:
            continue
        match = MatchRef(
            type=MatchType.ENTITY,
            id=entity_id,
            label=entity_id,
            datatype=record.datatype,
            url=ENTITY_URL_TEMPLATE.format(id=entity_id),
            score=float(CERTAIN_CONFIDENCE),
        )
        store.confirm(record.key, match, confidence=CERTAIN_CONFIDENCE, link_backed=True)
        confirmed += 1
    if confirmed:
        log.info("Confirmed %d link-backed values", confirmed)
    return confirmed


async def check_url_reachability(store: ReconciliationStore, probe: UrlProbe) -> int:
    """Probe pending URL values and attach an ``unreachable_url`` warning.

    Returns the number of unreachable values. The check is advisory: it never
    changes a record's status.
    """

    records = [
        record
        for record in store.all()
        if record.status is ReconciliationStatus.PENDING
        and value_kind_for(record.datatype) is ValueKind.URL
    ]
    if not records:
        return 0
    issues = await asyncio.gather(
        *(probe_url(probe, record.original_value.strip()) for record in records)
    )

    unreachable = 0
    for record, issue in zip(records, issues, strict=True):
        if record.key not in store:
            continue
        current = store.get(record.key)
        warnings = tuple(code for code in current.warnings if code != UNREACHABLE_URL)
        if issue is not None:
            warnings = (*warnings, issue.code)
            unreachable += 1
        current.warnings = warnings
    if unreachable:
        log.warning("%d of %d URL values could not be reached", unreachable, len(records))
    return unreachable
