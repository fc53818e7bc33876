"""JSON-LD context handling for linked-data URIs of source keys."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

COMMON_PREFIXES: Final[dict[str, str]] = {
    "schema": "https://schema.org/",
    "dc": "http://purl.org/dc/terms/",
    "dcterms": "http://purl.org/dc/terms/",
    "foaf": "http://xmlns.com/foaf/0.1/",
    "skos": "http://www.w3.org/2004/02/skos/core#",
}


def context_prefixes(context: object) -> dict[str, str]:
    """Extract ``prefix -> namespace`` pairs from an inline ``@context`` value.

    Remote contexts (plain URL strings) yield nothing here; the source adapter
    resolves them and passes the resulting mapping in.
    """

    prefixes: dict[str, str] = {}
    if isinstance(context, list):
        for entry in context:
            prefixes.update(context_prefixes(entry))
        return prefixes
    if isinstance(context, Mapping):
        inner = context.get("@context")
        if isinstance(inner, (Mapping, list)):
            return context_prefixes(inner)
        for prefix, uri in context.items():
            if isinstance(uri, str):
                prefixes[str(prefix)] = uri
            elif isinstance(uri, Mapping) and isinstance(uri.get("@id"), str):
                prefixes[str(prefix)] = str(uri["@id"])
    return prefixes


def _join(base: str, local_name: str) -> str:
    if base.endswith(("/", "#")):
        return base + local_name
    return f"{base}/{local_name}"


def linked_data_uri(key: str, prefixes: Mapping[str, str]) -> str | None:
    if ":" in key:
        prefix, local_name = key.split(":", 1)
        base = prefixes.get(prefix) or COMMON_PREFIXES.get(prefix.lower())
        return _join(base, local_name) if base else None

    lowered = key.lower()
    for prefix, uri in COMMON_PREFIXES.items():
        if lowered.startswith(prefix) and len(key) > len(prefix):
            return uri + key[len(prefix) :]

    default_ns = prefixes.get("")
    if default_ns:
        return default_ns + key
    return None
