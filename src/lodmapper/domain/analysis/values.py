"""Helpers for reading Omeka S style value objects.

Source values are usually arrays of objects such as
``{"type": "literal", "@value": "Title", "property_id": 1}``. These helpers turn
them into display strings, list their sub-fields, and infer a coarse type. None
of them raise on unexpected shapes.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Final

from lodmapper.domain.model import ValueType

RAW_VALUE_FIELD: Final[str] = "_value"
_PREVIEW_LENGTH = 30

_FALLBACK_VALUE_PROPS = ("@value", "o:label", "value", "name", "title", "label", "display_title")
_URL_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^-?\d+(?:[.,]\d+)?$")
_MONTHS = "January|February|March|April|May|June|July|August|September|October|November|December"
_MONTHS_SHORT = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"
DATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d{4}$"),
    re.compile(r"^\d{4}-\d{2}$"),
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    re.compile(r"^\d{4}-\d{2}-\d{2}T[\d:.]+(?:Z|[+-]\d{2}:?\d{2})?$"),
    re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"),
    re.compile(r"^\d{1,2}-\d{1,2}-\d{4}$"),
    re.compile(r"^\d{1,2}\.\d{1,2}\.\d{4}$"),
    re.compile(r"^\d{3}0s$"),
    re.compile(rf"^({_MONTHS})\s+\d{{1,2}},?\s+\d{{4}}$", re.IGNORECASE),
    re.compile(rf"^\d{{1,2}}\s+({_MONTHS})\s+\d{{4}}$", re.IGNORECASE),
    re.compile(rf"^({_MONTHS_SHORT})\s+\d{{1,2}},?\s+\d{{4}}$", re.IGNORECASE),
    re.compile(rf"^\d{{1,2}}\s+({_MONTHS_SHORT})\s+\d{{4}}$", re.IGNORECASE),
    re.compile(r"^(early|mid|late)\s+\d{4}s?$", re.IGNORECASE),
    re.compile(r"^c\.\s*\d{4}$", re.IGNORECASE),
    re.compile(r"^circa\s+\d{4}$", re.IGNORECASE),
    re.compile(r"^\d{4}-\d{4}$"),
    re.compile(r"^\d{4}/\d{4}$"),
)


def is_date_value(value: object) -> bool:
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    return any(pattern.match(trimmed) for pattern in DATE_PATTERNS)


def is_url(value: object) -> bool:
    return isinstance(value, str) and bool(_URL_RE.match(value.strip()))


def extract_sample_value(value: object) -> object:
    """Return the first element of a value array, or the value itself."""

    if isinstance(value, list):
        return value[0] if value else None
    return value


def value_to_string(value: object) -> str:
    """Return the human-meaningful text of a source value."""

    match value:
        case None:
            return ""
        case bool():
            return "true" if value else "false"
        case str():
            return value
        case int() | float():
            return str(value)
        case list():
            return value_to_string(value[0]) if value else ""
        case Mapping():
            return _object_to_string(value)
        case _:
            return str(value)


def _present(obj: Mapping[str, object], key: str) -> bool:
    return key in obj and obj[key] is not None


def _object_to_string(obj: Mapping[str, object]) -> str:
    value_type = obj.get("type")
    if isinstance(value_type, str):
        if value_type in {"literal", "numeric:timestamp"} and _present(obj, "@value"):
            return str(obj["@value"])
        if value_type.startswith("valuesuggest:") and _present(obj, "o:label"):
            return str(obj["o:label"])
        if value_type == "uri":
            if _present(obj, "o:label"):
                return str(obj["o:label"])
            if _present(obj, "@id"):
                return str(obj["@id"])

    for prop in _FALLBACK_VALUE_PROPS:
        if _present(obj, prop):
            return value_to_string(obj[prop])

    if _present(obj, "@id"):
        return str(obj["@id"])

    for key, val in obj.items():
        if key == "type" or key.startswith("property_"):
            continue
        if isinstance(val, str) and val.strip():
            return val

    return json.dumps(obj, default=str, ensure_ascii=False)


def _preview(value: object) -> str:
    match value:
        case None:
            return "null"
        case str():
            return f"{value[:_PREVIEW_LENGTH]}..." if len(value) > _PREVIEW_LENGTH else value
        case bool() | int() | float():
            return str(value)
        case _:
            return "[Object/Array]"


def extract_available_fields(sample: object) -> list[tuple[str, str]]:
    """List ``(field, preview)`` pairs a transformation can read from ``sample``."""

    if isinstance(sample, list):
        if not sample:
            return [(RAW_VALUE_FIELD, "Empty Array")]
        return extract_available_fields(sample[0])
    if isinstance(sample, Mapping):
        if not sample:
            return [(RAW_VALUE_FIELD, "No fields available")]
        return [(str(key), _preview(value)) for key, value in sample.items()]
    if sample is None or sample == "":
        return [(RAW_VALUE_FIELD, "N/A")]
    return [(RAW_VALUE_FIELD, str(sample))]


def get_field_value(sample: object, field: str | None) -> str:
    """Return the string value of ``field`` inside ``sample``; ``_value`` means the whole value."""

    if sample is None or field in (None, "", RAW_VALUE_FIELD):
        return value_to_string(sample)
    if isinstance(sample, list):
        return get_field_value(sample[0], field) if sample else ""
    if isinstance(sample, Mapping) and field in sample:
        return value_to_string(sample[field])
    return ""


def get_value_by_path(obj: object, path: str) -> object:
    """Follow a dot path (``a.b.0.c``) into nested mappings and lists."""

    current = obj
    for part in path.split("."):
        if not part:
            continue
        if isinstance(current, Mapping):
            if part not in current:
                return None
            current = current[part]
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def infer_value_type(value: object) -> ValueType | None:
    """Infer the coarse type of one occurrence; ``None`` for null or empty values."""

    match value:
        case None:
            return None
        case list():
            for element in value:
                inferred = infer_value_type(element)
                if inferred is not None:
                    return inferred
            return None
        case bool():
            return ValueType.STRING
        case int() | float():
            return ValueType.NUMBER
        case str():
            return _infer_string_type(value)
        case Mapping():
            return _infer_object_type(value)
        case _:
            return ValueType.STRING


def _infer_string_type(value: str) -> ValueType | None:
    text = value.strip()
    if not text:
        return None
    if is_url(text):
        return ValueType.LINK
    if is_date_value(text):
        return ValueType.DATE
    if _NUMBER_RE.match(text):
        return ValueType.NUMBER
    return ValueType.STRING


def _infer_object_type(obj: Mapping[str, object]) -> ValueType:
    value_type = obj.get("type")
    if value_type == "numeric:timestamp":
        return ValueType.DATE
    if value_type == "uri" or (isinstance(value_type, str) and value_type.startswith("resource")):
        return ValueType.LINK
    if "@value" in obj:
        inner = obj["@value"]
        if isinstance(inner, (Mapping, list)):
            return ValueType.NESTED
        return infer_value_type(inner) or ValueType.STRING
    if "@id" in obj and is_url(obj["@id"]):
        return ValueType.LINK
    return ValueType.NESTED
