"""Reference detection, custom references and property assignments."""

from __future__ import annotations

from .custom import (
    EMPTY_NAME,
    NO_URLS,
    CustomReferenceError,
    create_custom_reference,
    items_from_base_url,
    items_from_references,
    update_custom_reference,
    validate_custom_reference,
)
from .detector import ARK_RESOLVER, DETECTED_TYPES, DetectionResult, detect, detect_record
from .store import ReferenceStore, SummaryEntry

__all__ = [
    "ARK_RESOLVER",
    "DETECTED_TYPES",
    "EMPTY_NAME",
    "NO_URLS",
    "CustomReferenceError",
    "DetectionResult",
    "ReferenceStore",
    "SummaryEntry",
    "create_custom_reference",
    "detect",
    "detect_record",
    "items_from_base_url",
    "items_from_references",
    "update_custom_reference",
    "validate_custom_reference",
]
