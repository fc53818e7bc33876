"""Reusable fakes for lookup ports and HTTP-backed adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from lodmapper.adapters.http_resilience import ResilientClient
from lodmapper.domain.model import MatchRef, MatchType, PropertyRef
from lodmapper.domain.ports import EntitySearchError, PropertyLookupError

if TYPE_CHECKING:
    from collections.abc import Callable

    from lodmapper.config.http_resilience import ResilienceConfig
    from lodmapper.domain.model import LanguageRef


def make_property(
    property_id: str = "P1476",
    *,
    label: str | None = None,
    datatype: str = "string",
    **kwargs: object,
) -> PropertyRef:
    kwargs.setdefault("constraints_fetched", True)
    return PropertyRef(
        id=property_id,
        label=label or property_id,
        datatype=datatype,
        **kwargs,  # type: ignore[arg-type]
    )


def make_entity(entity_id: str, label: str = "", score: float | None = None) -> MatchRef:
    return MatchRef(type=MatchType.ENTITY, id=entity_id, label=label or entity_id, score=score)


@dataclass
class FakePropertyLookup:
    properties: dict[str, PropertyRef] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def get_property(self, property_id: str) -> PropertyRef:
        self.calls.append(property_id)
        if property_id in self.failures:
            raise PropertyLookupError(property_id, self.failures[property_id])
        try:
            return self.properties[property_id]
        except KeyError:
            raise PropertyLookupError(property_id, "not found") from None


@dataclass
class FakeSearcher:
    results: dict[str, list[MatchRef]] = field(default_factory=dict)
    failures: set[str] = field(default_factory=set)
    calls: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)

    async def search_entities(
        self,
        query: str,
        *,
        language: str = "en",  # noqa: ARG002
        limit: int = 10,
        type_ids: tuple[str, ...] = (),
    ) -> list[MatchRef]:
        self.calls.append((query, type_ids))
        if query in self.failures:
            raise EntitySearchError(f"search for {query} failed")
        return list(self.results.get(query, []))[:limit]


@dataclass
class FakeLanguageSearcher:
    languages: list[LanguageRef] = field(default_factory=list)
    fail: bool = False

    async def search_languages(
        self,
        query: str,  # noqa: ARG002
        *,
        limit: int = 10,
    ) -> list[LanguageRef]:
        if self.fail:
            raise EntitySearchError("language search unavailable")
        return self.languages[:limit]


@dataclass
class FakeUrlProbe:
    reachable: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    async def is_reachable(self, url: str) -> bool:
        self.calls.append(url)
        return url in self.reachable

def make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory
