"""Validation and construction of user-defined reference sources."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from lodmapper.domain.analysis.values import is_url
from lodmapper.domain.model import CustomReference, CustomReferenceItem, new_custom_reference_id

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lodmapper.domain.model import Reference, ReferenceType

EMPTY_NAME = "Reference name cannot be empty"
NO_URLS = "At least one item must have a reference URL"


class CustomReferenceError(ValueError):
    """Raised with every validation problem found, not just the first."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = tuple(errors)
        super().__init__("; ".join(self.errors))


def _clean_items(items: Iterable[CustomReferenceItem]) -> list[CustomReferenceItem]:
    return [
        CustomReferenceItem(item_id=item.item_id, url=item.url.strip())
        for item in items
        if item.url.strip()
    ]


def validate_custom_reference(name: str, items: Iterable[CustomReferenceItem]) -> list[str]:
    """Return every problem with ``name`` and ``items``; empty when valid."""

    errors: list[str] = []
    if not name.strip():
        errors.append(EMPTY_NAME)
    filled = _clean_items(items)
    if not filled:
        errors.append(NO_URLS)
    invalid = [item.item_id for item in filled if not is_url(item.url)]
    if invalid:
        errors.append(f"Invalid URL for item(s): {', '.join(invalid)}")
    return errors


def create_custom_reference(
    name: str,
    items: Iterable[CustomReferenceItem],
    *,
    reference_id: str | None = None,
    base_url: str | None = None,
    original_type: ReferenceType | None = None,
) -> CustomReference:
    """Build a custom reference; items with empty URLs are dropped."""

    materialized = list(items)
    errors = validate_custom_reference(name, materialized)
    if errors:
        raise CustomReferenceError(errors)
    return CustomReference(
        id=reference_id or new_custom_reference_id(),
        name=name.strip(),
        items=tuple(_clean_items(materialized)),
        base_url=base_url.strip() if base_url and base_url.strip() else None,
        original_type=original_type,
    )


def update_custom_reference(
    existing: CustomReference,
    *,
    name: str | None = None,
    items: Iterable[CustomReferenceItem] | None = None,
    base_url: str | None = None,
) -> CustomReference:
    """Validate and apply changes, keeping id, creation time and original type."""

    new_name = existing.name if name is None else name
    new_items = list(existing.items if items is None else items)
    errors = validate_custom_reference(new_name, new_items)
    if errors:
        raise CustomReferenceError(errors)
    return replace(
        existing,
        name=new_name.strip(),
        items=tuple(_clean_items(new_items)),
        base_url=existing.base_url if base_url is None else (base_url.strip() or None),
        updated_at=datetime.now(UTC),
    )


def items_from_references(references: Iterable[Reference]) -> list[CustomReferenceItem]:
    """Editable items from detected references, first URL per item."""

    items: dict[str, CustomReferenceItem] = {}
    for reference in references:
        items.setdefault(
            reference.item_id, CustomReferenceItem(item_id=reference.item_id, url=reference.url)
        )
    return list(items.values())


def items_from_base_url(base_url: str, item_ids: Iterable[str]) -> list[CustomReferenceItem]:
    """One URL per item by substituting ``{id}`` (or appending the id)."""

    template = base_url.strip()
    items: list[CustomReferenceItem] = []
    for item_id in item_ids:
        url = template.replace("{id}", item_id) if "{id}" in template else f"{template}{item_id}"
        items.append(CustomReferenceItem(item_id=item_id, url=url))
    return items
