"""Field discovery for compose and extract blocks."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

_PREVIEW_LENGTH = 50
_IMMEDIATE_VALUE_PROPS = ("@value", "o:label", "value", "name", "title", "label", "display_title")


@dataclass(slots=True, frozen=True)
class FieldPath:
    path: str
    value: str

    @property
    def preview(self) -> str:
        if len(self.value) > _PREVIEW_LENGTH:
            return f"{self.value[:_PREVIEW_LENGTH]}..."
        return self.value


def extract_all_fields(obj: object, base_path: str = "") -> list[FieldPath]:
    """Flatten ``obj`` into dot paths with their scalar values.

    For nested Omeka value objects the common display props (``@value``,
    ``o:label`` ...) are additionally listed directly under the object path, so
    ``dcterms:title.0.@value`` shows up before the rest of the object.
    """

    results: list[FieldPath] = []
    _collect(obj, base_path, results)
    return results


def _collect(obj: object, base_path: str, results: list[FieldPath]) -> None:
    if isinstance(obj, list):
        for index, item in enumerate(obj):
            _collect(item, f"{base_path}.{index}" if base_path else str(index), results)
        return
    if isinstance(obj, Mapping):
        for key, value in obj.items():
            path = f"{base_path}.{key}" if base_path else str(key)
            if isinstance(value, Mapping):
                for prop in _IMMEDIATE_VALUE_PROPS:
                    candidate = value.get(prop)
                    if isinstance(candidate, str) and candidate:
                        results.append(FieldPath(path=f"{path}.{prop}", value=candidate))
                _collect(value, path, results)
            elif isinstance(value, list):
                _collect(value, path, results)
            elif value is not None:
                results.append(FieldPath(path=path, value=str(value)))
        return
    if base_path and obj is not None:
        results.append(FieldPath(path=base_path, value=str(obj)))


def search_fields(fields: list[FieldPath], term: str) -> list[FieldPath]:
    """Case-insensitive filter on path or value; an empty term keeps everything."""

    needle = term.strip().lower()
    if not needle:
        return list(fields)
    return [
        field for field in fields if needle in field.path.lower() or needle in field.value.lower()
    ]
