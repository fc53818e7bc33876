"""Typed change notifications between the session stores.

Stores publish small event objects to a :class:`ChangeFeed`. Interested parties
either subscribe to one event type (handlers run synchronously, in subscription
order) or poll the pending queue with :meth:`ChangeFeed.drain`. The queue keeps only
the most recent ``max_pending`` events.
"""

from __future__ import annotations

from collections import defaultdict, deque
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from .model import KeyCategory, ReconciliationStatus, RecordKey

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class KeyCategorized:
    key: str
    previous: KeyCategory | None
    current: KeyCategory


@dataclass(slots=True, frozen=True)
class MappingAdded:
    mapping_id: str
    key: str
    property_id: str


@dataclass(slots=True, frozen=True)
class MappingRemoved:
    mapping_id: str
    key: str


@dataclass(slots=True, frozen=True)
class MappingIdChanged:
    old_id: str
    new_id: str
    moved_blocks: int


@dataclass(slots=True, frozen=True)
class BlocksChanged:
    mapping_id: str
    block_count: int


@dataclass(slots=True, frozen=True)
class RecordStatusChanged:
    key: RecordKey
    previous: ReconciliationStatus
    current: ReconciliationStatus


@dataclass(slots=True, frozen=True)
class ReferencesAssigned:
    property_id: str
    reference_ids: frozenset[str]


type ChangeEvent = (
    KeyCategorized
    | MappingAdded
    | MappingRemoved
    | MappingIdChanged
    | BlocksChanged
    | RecordStatusChanged
    | ReferencesAssigned
)


DEFAULT_MAX_PENDING = 1000


class ChangeFeed:
    def __init__(self, *, max_pending: int = DEFAULT_MAX_PENDING) -> None:
        self._pending: deque[ChangeEvent] = deque(maxlen=max_pending)
        self._handlers: dict[type, list[Callable[[ChangeEvent], None]]] = defaultdict(list)

    def subscribe[E: ChangeEvent](
        self,
        event_type: type[E],
        handler: Callable[[E], None],
    ) -> Callable[[], None]:
        """Register ``handler`` for ``event_type``; returns an unsubscribe callable."""

        handlers = self._handlers[event_type]
        handlers.append(handler)  # type: ignore[arg-type]

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)  # type: ignore[arg-type]

        return unsubscribe

    def publish(self, event: ChangeEvent) -> None:
        self._pending.append(event)
        for handler in list(self._handlers.get(type(event), ())):
            handler(event)
        log.debug("Published %s", event)

    def drain(self) -> list[ChangeEvent]:
        events = list(self._pending)
        self._pending.clear()
        return events

    @property
    def pending_count(self) -> int:
        return len(self._pending)
