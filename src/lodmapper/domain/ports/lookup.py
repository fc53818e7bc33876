"""Ports for looking things up in the target knowledge base."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from lodmapper.domain.model import LanguageRef, MatchRef, PropertyRef


class LookupFailure(RuntimeError):
    """Base class for recoverable lookup failures surfaced to callers."""


class PropertyLookupError(LookupFailure):
    """Raised when a property (or its constraints) cannot be loaded."""

    def __init__(self, property_id: str, message: str) -> None:
        super().__init__(f"{property_id}: {message}")
        self.property_id = property_id


class EntitySearchError(LookupFailure):
    """Raised when an entity search fails at the transport or payload level."""


@runtime_checkable
class EntitySearcher(Protocol):
    async def search_entities(
        self,
        query: str,
        *,
        language: str = "en",
        limit: int = 10,
        type_ids: tuple[str, ...] = (),
    ) -> list[MatchRef]:
        ...


@runtime_checkable
class PropertyLookup(Protocol):
    async def get_property(self, property_id: str) -> PropertyRef:
        """Return the property with its constraints, or raise ``PropertyLookupError``."""
        ...


@runtime_checkable
class LanguageSearcher(Protocol):
    async def search_languages(self, query: str, *, limit: int = 10) -> list[LanguageRef]:
        ...


@runtime_checkable
class UrlProbe(Protocol):
    async def is_reachable(self, url: str) -> bool:
        ...


__all__ = [
    "EntitySearchError",
    "EntitySearcher",
    "LanguageSearcher",
    "LookupFailure",
    "PropertyLookup",
    "PropertyLookupError",
    "UrlProbe",
]
