"""Identifier derivation for mappings and generated objects."""

from __future__ import annotations

from uuid import uuid4

_SEPARATOR = "::"


def mapping_id(key: str, property_id: str, subfield: str | None = None) -> str:
    """Return the stable id of a key/property/subfield assignment.

    Pure: equal inputs always produce the same id, and a different subfield
    (including none vs. some) always produces a different id.
    """

    if not key:
        raise ValueError("Mapping key must not be empty")
    if not property_id:
        raise ValueError("Property id must not be empty")
    base = f"{key}{_SEPARATOR}{property_id}"
    if subfield:
        return f"{base}{_SEPARATOR}{subfield}"
    return base


def manual_mapping_id(property_id: str) -> str:
    return f"manual{_SEPARATOR}{property_id}"


def new_block_id() -> str:
    return f"block-{uuid4().hex[:12]}"


def new_custom_reference_id() -> str:
    return f"custom-ref-{uuid4().hex[:12]}"
