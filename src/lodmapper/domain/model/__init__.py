"""Domain model for the mapping and reconciliation engine."""

from __future__ import annotations

from .enums import (
    BlockType,
    ConstraintStatus,
    IdentifierType,
    KeyCategory,
    MatchType,
    ReconciliationStatus,
    ReferenceType,
    TimePrecision,
    ValueKind,
    ValueType,
)
from .ids import manual_mapping_id, mapping_id, new_block_id, new_custom_reference_id
from .languages import COMMON_LANGUAGES, LanguageRef, find_language, search_common_languages
from .mapping import (
    UNKNOWN_IDENTIFIER,
    IdentifierMatch,
    ManualProperty,
    MappedEntry,
    MappingKey,
    PropertyMapping,
    RequiredPlaceholder,
)
from .properties import (
    ALIASES_PROPERTY,
    DESCRIPTION_PROPERTY,
    INSTANCE_OF_PROPERTY,
    LABEL_PROPERTY,
    METADATA_PROPERTIES,
    SUBCLASS_OF_ID,
    FormatConstraint,
    OtherConstraint,
    PropertyConstraints,
    PropertyRef,
    ValueTypeConstraint,
    datatype_label,
)
from .reconciliation import (
    CERTAIN_CONFIDENCE,
    MatchRef,
    ReconciliationProgress,
    ReconciliationRecord,
    RecordKey,
)
from .records import JsonObject, normalize_records, record_item_id, record_values
from .references import (
    MAX_SUMMARY_EXAMPLES,
    REFERENCE_TYPE_LABELS,
    CustomReference,
    CustomReferenceItem,
    Reference,
    ReferenceSummary,
)
from .transform import TransformationBlock

__all__ = [
    "ALIASES_PROPERTY",
    "CERTAIN_CONFIDENCE",
    "COMMON_LANGUAGES",
    "DESCRIPTION_PROPERTY",
    "INSTANCE_OF_PROPERTY",
    "LABEL_PROPERTY",
    "MAX_SUMMARY_EXAMPLES",
    "METADATA_PROPERTIES",
    "REFERENCE_TYPE_LABELS",
    "SUBCLASS_OF_ID",
    "UNKNOWN_IDENTIFIER",
    "BlockType",
    "ConstraintStatus",
    "CustomReference",
    "CustomReferenceItem",
    "FormatConstraint",
    "IdentifierMatch",
    "IdentifierType",
    "JsonObject",
    "KeyCategory",
    "LanguageRef",
    "ManualProperty",
    "MappedEntry",
    "MappingKey",
    "MatchRef",
    "MatchType",
    "OtherConstraint",
    "PropertyConstraints",
    "PropertyMapping",
    "PropertyRef",
    "ReconciliationProgress",
    "ReconciliationRecord",
    "ReconciliationStatus",
    "RecordKey",
    "Reference",
    "ReferenceSummary",
    "ReferenceType",
    "RequiredPlaceholder",
    "TimePrecision",
    "TransformationBlock",
    "ValueKind",
    "ValueType",
    "ValueTypeConstraint",
    "datatype_label",
    "find_language",
    "manual_mapping_id",
    "mapping_id",
    "new_block_id",
    "new_custom_reference_id",
    "normalize_records",
    "record_item_id",
    "record_values",
    "search_common_languages",
]
