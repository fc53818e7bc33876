"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.adapters.omeka import (
    SourceAPIError,
    fetch_context,
    fetch_records,
    load_records_file,
    remote_context_url,
)
from lodmapper.adapters.url_probe import HttpUrlProbe
from lodmapper.adapters.wikidata import WikidataClient
from lodmapper.config import (
    get_mapping_config,
    get_reconciliation_config,
    get_wikidata_config,
)
from lodmapper.domain.analysis import IgnoreRules, analyze
from lodmapper.domain.mapping import (
    AutoMapSummary,
    PropertyCatalog,
    auto_map,
    identifier_candidates,
)
from lodmapper.domain.reconciliation import (
    SuggestSummary,
    check_url_reachability,
    confirm_link_backed,
    suggest_matches,
)
from lodmapper.domain.session import Session

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

    from lodmapper.config import MappingConfig, ReconciliationConfig
    from lodmapper.domain.model import JsonObject, MappingKey
    from lodmapper.domain.ports import EntitySearcher, PropertyLookup, UrlProbe

    type ContextResolver = Callable[[str], Mapping[str, str]]

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True, frozen=True)
class AnalysisResult:
    session: Session
    keys: tuple[MappingKey, ...]
    auto_mapped: AutoMapSummary


@dataclass(slots=True, kw_only=True, frozen=True)
class SuggestionResult:
    link_backed: int
    suggestions: SuggestSummary
    unreachable_urls: int = 0


def load_source_records(
    *,
    source_url: str | None = None,
    records_file: Path | None = None,
    per_page: int | None = None,
    max_items: int | None = None,
) -> list[JsonObject]:
    """Records from a local export when given, otherwise from the collection API."""

    if records_file is not None:
        records = load_records_file(records_file)
        log.info("Loaded %d records from %s", len(records), records_file)
        return records[:max_items] if max_items is not None else records
    return fetch_records(source_url, per_page=per_page, max_items=max_items)


def _resolve_context(
    records: list[JsonObject], resolver: ContextResolver | None
) -> Mapping[str, str] | None:
    url = remote_context_url(records)
    if url is None:
        return None
    try:
        return (resolver or fetch_context)(url)
    except SourceAPIError as exc:
        # analysis still works with the built-in prefixes
        log.warning("Could not resolve JSON-LD context %s: %s", url, exc)
        return None


def analyze_records(
    records: object,
    *,
    session: Session | None = None,
    mapping_config: MappingConfig | None = None,
    property_lookup: PropertyLookup | None = None,
    context_resolver: ContextResolver | None = None,
    auto_map_identifiers: bool = True,
) -> AnalysisResult:
    """Load records into a session, analyze their keys and auto-map identifiers."""

    effective_session = session or Session()
    config = mapping_config or get_mapping_config()
    loaded = effective_session.load_records(records)
    log.info(
        "Starting analysis: records=%d, ignore_patterns=%d (%s)",
        len(loaded),
        len(config.ignored_key_patterns),
        "defaults" if config.from_defaults else config.source,
    )

    keys = analyze(
        loaded,
        ignore_rules=IgnoreRules.from_patterns(config.ignored_key_patterns),
        context=_resolve_context(loaded, context_resolver),
    )
    effective_session.mapping.seed(keys)
    effective_session.mapping.ensure_metadata_properties()

    summary = AutoMapSummary()
    if auto_map_identifiers:
        candidates = identifier_candidates(effective_session.mapping.keys())
        if candidates:
            lookup = property_lookup or WikidataClient(config=get_wikidata_config())
            summary = asyncio.run(
                auto_map(effective_session.mapping, candidates, PropertyCatalog(lookup))
            )

    log.info(
        "Finished analysis: keys=%d, auto_mapped=%d, auto_map_failures=%d",
        len(keys),
        summary.success_count,
        summary.failure_count,
    )
    return AnalysisResult(
        session=effective_session,
        keys=tuple(effective_session.mapping.keys()),
        auto_mapped=summary,
    )


def suggest_reconciliations(
    session: Session,
    *,
    searcher: EntitySearcher | None = None,
    language: str | None = None,
    limit: int = 10,
    reconciliation_config: ReconciliationConfig | None = None,
    url_probe: UrlProbe | None = None,
) -> SuggestionResult:
    """Create reconciliation records, confirm link-backed values and pre-fetch candidates.

    URL values are probed for reachability when the configuration asks for it.
    """

    config = reconciliation_config or get_reconciliation_config()
    session.initialize_reconciliation()
    store = session.reconciliation
    link_backed = confirm_link_backed(store)

    if searcher is None:
        wikidata_config = get_wikidata_config()
        searcher = WikidataClient(config=wikidata_config)
        language = language or wikidata_config.language
    properties = {
        mapping.property.id: mapping.property for mapping in session.mapping.mappings()
    }
    summary = asyncio.run(
        suggest_matches(
            store, searcher, properties=properties, language=language or "en", limit=limit
        )
    )
    unreachable = 0
    if config.probe_urls:
        unreachable = asyncio.run(check_url_reachability(store, url_probe or HttpUrlProbe()))
    progress = store.progress()
    log.info(
        "Finished suggestions: records=%d, reconciled=%d, searched=%d, failures=%d, "
        "unreachable_urls=%d",
        progress.total,
        progress.reconciled,
        summary.searched,
        len(summary.failures),
        unreachable,
    )
    return SuggestionResult(
        link_backed=link_backed, suggestions=summary, unreachable_urls=unreachable
    )
