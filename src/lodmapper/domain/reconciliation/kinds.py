"""Property datatype -> reconciliation path."""

from __future__ import annotations

from typing import Final

from lodmapper.domain.model import ValueKind

_KIND_BY_DATATYPE: Final[dict[str, ValueKind]] = {
    "wikibase-item": ValueKind.ENTITY,
    "string": ValueKind.STRING,
    "monolingualtext": ValueKind.MONOLINGUAL_TEXT,
    "external-id": ValueKind.EXTERNAL_ID,
    "url": ValueKind.URL,
    "time": ValueKind.TIME,
}


def value_kind_for(datatype: str | None) -> ValueKind:
    if datatype is None:
        return ValueKind.UNSUPPORTED
    return _KIND_BY_DATATYPE.get(datatype, ValueKind.UNSUPPORTED)
