"""Source keys and their assignments to target properties."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .enums import IdentifierType, KeyCategory, ValueType
from .ids import manual_mapping_id, mapping_id

if TYPE_CHECKING:
    from .properties import PropertyRef


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, kw_only=True, frozen=True)
class IdentifierMatch:
    """Result of classifying a key/sample pair against known identifier shapes."""

    type: IdentifierType
    property_id: str | None = None
    label: str | None = None
    description: str | None = None
    value: str | None = None
    confidence: float = 0.0

    @property
    def recognized(self) -> bool:
        return self.type is not IdentifierType.UNKNOWN

    @property
    def mappable(self) -> bool:
        return self.property_id is not None


UNKNOWN_IDENTIFIER = IdentifierMatch(type=IdentifierType.UNKNOWN)


@dataclass(slots=True, kw_only=True)
class MappingKey:
    key: str
    sample_value: object = None
    frequency: int = 0
    total_items: int = 0
    category: KeyCategory = KeyCategory.NON_LINKED
    value_type: ValueType = ValueType.STRING
    type_counts: dict[ValueType, int] = field(default_factory=dict)
    ambiguous_type: bool = False
    linked_data_uri: str | None = None
    identifier: IdentifierMatch = UNKNOWN_IDENTIFIER

    @property
    def coverage(self) -> float:
        if self.total_items <= 0:
            return 0.0
        return self.frequency / self.total_items


@dataclass(slots=True, kw_only=True)
class PropertyMapping:
    """A source key assigned to a target property.

    ``mapping_id`` is derived from ``(key, property.id, subfield)`` every time it is
    read, so it can never drift from the fields it is built from.
    """

    key: str
    property: PropertyRef
    subfield: str | None = None
    mapped_at: datetime = field(default_factory=_utcnow)
    auto_mapped: bool = False
    identifier_type: IdentifierType | None = None

    @property
    def mapping_id(self) -> str:
        return mapping_id(self.key, self.property.id, self.subfield)


@dataclass(slots=True, kw_only=True)
class ManualProperty:
    """A property added by hand, carrying a default value for every item."""

    property: PropertyRef
    default_value: object = None
    required: bool = False
    added_at: datetime = field(default_factory=_utcnow)

    @property
    def mapping_id(self) -> str:
        return manual_mapping_id(self.property.id)


@dataclass(slots=True, kw_only=True, frozen=True)
class RequiredPlaceholder:
    """Virtual entry shown in the mapped view until a real mapping satisfies it."""

    property: PropertyRef
    satisfied_by: tuple[str, ...]
    reason: str

    @property
    def mapping_id(self) -> str:
        return f"placeholder::{self.property.id}"


type MappedEntry = PropertyMapping | ManualProperty | RequiredPlaceholder
