"""Debounced entity search with generation-based staleness checks.

Every keystroke bumps the field's generation. A search only applies its result
when its generation is still the current one; a query that is already stale
after the debounce delay never reaches the network.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.config import ReconciliationConfig
from lodmapper.domain.ports import LookupFailure

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from lodmapper.domain.model import MatchRef
    from lodmapper.domain.ports import EntitySearcher

log = getLogger(__name__)

type Sleep = Callable[[float], Awaitable[object]]


@dataclass(slots=True, frozen=True)
class SearchTicket:
    generation: int
    query: str


@dataclass(slots=True, frozen=True)
class SearchOutcome:
    query: str
    results: tuple[MatchRef, ...] = ()
    error: str | None = None


class SearchField:
    def __init__(
        self,
        searcher: EntitySearcher,
        *,
        config: ReconciliationConfig | None = None,
        language: str = "en",
        type_ids: tuple[str, ...] = (),
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._searcher = searcher
        self._config = config or ReconciliationConfig()
        self._language = language
        self._type_ids = type_ids
        self._sleep = sleep
        self._generation = 0
        self._outcome = SearchOutcome(query="")

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def outcome(self) -> SearchOutcome:
        """Result of the most recent query that was still current when it finished."""

        return self._outcome

    def input(self, query: str) -> SearchTicket:
        self._generation += 1
        return SearchTicket(generation=self._generation, query=query)

    def is_current(self, ticket: SearchTicket) -> bool:
        return ticket.generation == self._generation

    async def run(self, ticket: SearchTicket) -> SearchOutcome | None:
        """Debounce, search and apply; returns ``None`` when the ticket went stale."""

        query = ticket.query.strip()
        if not query:
            if self.is_current(ticket):
                self._outcome = SearchOutcome(query="")
                return self._outcome
            return None

        await self._sleep(self._config.debounce_for(query))
        if not self.is_current(ticket):
            log.debug("Search %r superseded before dispatch", query)
            return None

        try:
            results = await self._searcher.search_entities(
                query,
                language=self._language,
                limit=self._config.search_limit,
                type_ids=self._type_ids,
            )
        except LookupFailure as exc:
            if not self.is_current(ticket):
                return None
            log.warning("Entity search for %r failed: %s", query, exc)
            self._outcome = SearchOutcome(query=query, error=str(exc))
            return self._outcome

        if not self.is_current(ticket):
            log.debug("Dropping stale results for %r", query)
            return None
        self._outcome = SearchOutcome(query=query, results=tuple(results))
        return self._outcome

    async def search(self, query: str) -> SearchOutcome | None:
        return await self.run(self.input(query))
