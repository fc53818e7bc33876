"""Wikidata lookup adapter."""

from __future__ import annotations

from .client import WikidataAPIError, WikidataClient

__all__ = [
    "WikidataAPIError",
    "WikidataClient",
]
