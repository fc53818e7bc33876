"""Per-session cache of target property descriptions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lodmapper.domain.model import PropertyRef
    from lodmapper.domain.ports import PropertyLookup

log = getLogger(__name__)


class PropertyCatalog:
    """Caches properties whose constraints were loaded completely.

    A failed lookup raises and leaves the cache untouched. A successful lookup
    replaces the cached entry as a whole; partial data is never merged into an
    older entry.
    """

    def __init__(self, lookup: PropertyLookup) -> None:
        self._lookup = lookup
        self._cache: dict[str, PropertyRef] = {}

    async def get(self, property_id: str, *, refresh: bool = False) -> PropertyRef:
        if not refresh:
            cached = self._cache.get(property_id)
            if cached is not None:
                return cached
        prop = await self._lookup.get_property(property_id)
        self.put(prop)
        return prop

    def put(self, prop: PropertyRef) -> None:
        if not prop.constraints_fetched:
            log.debug("Not caching %s: constraints incomplete", prop.id)
            return
        self._cache[prop.id] = prop

    def cached(self, property_id: str) -> PropertyRef | None:
        return self._cache.get(property_id)

    def invalidate(self, property_id: str) -> None:
        self._cache.pop(property_id, None)

    def __contains__(self, property_id: object) -> bool:
        return property_id in self._cache

    def __len__(self) -> int:
        return len(self._cache)
