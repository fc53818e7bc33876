"""Key to property mapping state."""

from __future__ import annotations

from .auto_map import (
    AutoMapCandidate,
    AutoMapFailure,
    AutoMapSummary,
    auto_map,
    identifier_candidates,
)
from .catalog import PropertyCatalog
from .store import REQUIRED_PLACEHOLDERS, MappingError, MappingSnapshot, MappingStore
from .values import CandidateValue, extract_property_values, manual_property_value

__all__ = [
    "REQUIRED_PLACEHOLDERS",
    "AutoMapCandidate",
    "AutoMapFailure",
    "AutoMapSummary",
    "CandidateValue",
    "MappingError",
    "MappingSnapshot",
    "MappingStore",
    "PropertyCatalog",
    "auto_map",
    "extract_property_values",
    "identifier_candidates",
    "manual_property_value",
]
