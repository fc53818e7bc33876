"""Helpers for the raw JSON-LD records handed to the engine."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

type JsonObject = Mapping[str, object]

_ID_FIELDS = ("@id", "o:id", "id")


def normalize_records(data: object) -> list[JsonObject]:
    """Accept a list of records, an ``{"items": [...]}`` wrapper, or a single record.

    Non-mapping entries are dropped; the engine never fails on input shape.
    """

    if isinstance(data, Mapping):
        items = data.get("items")
        if isinstance(items, Sequence) and not isinstance(items, str):
            return [item for item in items if isinstance(item, Mapping)]
        return [data]
    if isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
        return [item for item in data if isinstance(item, Mapping)]
    return []


def record_item_id(record: JsonObject, index: int) -> str:
    for field_name in _ID_FIELDS:
        value = record.get(field_name)
        if isinstance(value, (str, int)) and not isinstance(value, bool) and str(value):
            return str(value)
    return f"item-{index}"


def record_values(record: JsonObject, key: str) -> list[object]:
    """Return the non-null values stored under ``key`` as a list."""

    raw = record.get(key)
    if raw is None:
        return []
    if isinstance(raw, list):
        return [value for value in raw if value is not None]
    return [raw]
