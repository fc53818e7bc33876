from __future__ import annotations

from .lookup import (
    EntitySearchError,
    EntitySearcher,
    LanguageSearcher,
    LookupFailure,
    PropertyLookup,
    PropertyLookupError,
    UrlProbe,
)

__all__ = [
    "EntitySearchError",
    "EntitySearcher",
    "LanguageSearcher",
    "LookupFailure",
    "PropertyLookup",
    "PropertyLookupError",
    "UrlProbe",
]
