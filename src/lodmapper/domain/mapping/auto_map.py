"""Concurrent auto-mapping of keys whose values look like known identifiers."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.model import KeyCategory

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from lodmapper.domain.model import IdentifierType, MappingKey, PropertyMapping

    from .catalog import PropertyCatalog
    from .store import MappingStore

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True, frozen=True)
class AutoMapCandidate:
    key: str
    property_id: str
    identifier_type: IdentifierType | None = None


@dataclass(slots=True, kw_only=True, frozen=True)
class AutoMapFailure:
    key: str
    property_id: str
    message: str


@dataclass(slots=True, kw_only=True, frozen=True)
class AutoMapSummary:
    mapped: tuple[PropertyMapping, ...] = ()
    failures: tuple[AutoMapFailure, ...] = ()

    @property
    def success_count(self) -> int:
        return len(self.mapped)

    @property
    def failure_count(self) -> int:
        return len(self.failures)


def identifier_candidates(keys: Iterable[MappingKey]) -> list[AutoMapCandidate]:
    """Non-linked keys whose identifier hit names a target property."""

    candidates: list[AutoMapCandidate] = []
    for key in keys:
        if key.category is not KeyCategory.NON_LINKED:
            continue
        match = key.identifier
        if match.property_id is None:
            continue
        candidates.append(
            AutoMapCandidate(key=key.key, property_id=match.property_id, identifier_type=match.type)
        )
    return candidates


async def auto_map(
    store: MappingStore,
    candidates: Sequence[AutoMapCandidate],
    catalog: PropertyCatalog,
) -> AutoMapSummary:
    """Fetch every candidate's property concurrently and map the ones that succeed.

    The store is only touched after all fetches settled. A failed fetch leaves
    its key non-linked and is reported in the summary.
    """

    if not candidates:
        return AutoMapSummary()

    results = await asyncio.gather(
        *(catalog.get(candidate.property_id) for candidate in candidates),
        return_exceptions=True,
    )

    mapped: list[PropertyMapping] = []
    failures: list[AutoMapFailure] = []
    for candidate, result in zip(candidates, results, strict=True):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            log.warning(
                "Auto-mapping %s to %s failed: %s", candidate.key, candidate.property_id, result
            )
            failures.append(
                AutoMapFailure(
                    key=candidate.key, property_id=candidate.property_id, message=str(result)
                )
            )
            continue
        mapped.append(
            store.map(
                candidate.key,
                result,
                auto_mapped=True,
                identifier_type=candidate.identifier_type,
            )
        )

    log.info("Auto-mapped %d keys, %d failed", len(mapped), len(failures))
    return AutoMapSummary(mapped=tuple(mapped), failures=tuple(failures))
