"""Reference values: URLs that substantiate statements."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from .enums import ReferenceType

MAX_SUMMARY_EXAMPLES = 10

REFERENCE_TYPE_LABELS: dict[ReferenceType, str] = {
    ReferenceType.BACK_LINK: "Omeka API item",
    ReferenceType.BIBLIOGRAPHIC: "OCLC WorldCat",
    ReferenceType.PERSISTENT_ID: "ARK identifier",
    ReferenceType.CUSTOM: "Custom reference",
}


@dataclass(slots=True, kw_only=True, frozen=True)
class Reference:
    type: ReferenceType
    url: str
    item_id: str
    display_name: str = ""

    def __post_init__(self) -> None:
        if not self.display_name:
            object.__setattr__(self, "display_name", REFERENCE_TYPE_LABELS[self.type])


@dataclass(slots=True, kw_only=True, frozen=True)
class ReferenceSummary:
    count: int = 0
    examples: tuple[Reference, ...] = ()

    def __post_init__(self) -> None:
        if len(self.examples) > MAX_SUMMARY_EXAMPLES:
            raise ValueError(f"A summary keeps at most {MAX_SUMMARY_EXAMPLES} examples")


@dataclass(slots=True, kw_only=True, frozen=True)
class CustomReferenceItem:
    item_id: str
    url: str


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, kw_only=True, frozen=True)
class CustomReference:
    """User-defined reference source with one URL per covered item.

    ``original_type`` is set when the entry was converted from an auto-detected
    type, so listings can show it in that type's place.
    """

    id: str
    name: str
    items: tuple[CustomReferenceItem, ...]
    base_url: str | None = None
    original_type: ReferenceType | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def count(self) -> int:
        return len(self.items)

    def url_for(self, item_id: str) -> str | None:
        for item in self.items:
            if item.item_id == item_id:
                return item.url
        return None

    def as_references(self) -> list[Reference]:
        return [
            Reference(
                type=ReferenceType.CUSTOM,
                url=item.url,
                item_id=item.item_id,
                display_name=self.name,
            )
            for item in self.items
        ]
