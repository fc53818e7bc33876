"""Key analysis and identifier classification."""

from __future__ import annotations

from .context import COMMON_PREFIXES, context_prefixes, linked_data_uri
from .identifiers import (
    IDENTIFIER_RULES,
    IdentifierField,
    analyze_fields_for_identifiers,
    classify,
    detect_all,
    identifier_property,
)
from .ignore import IgnoreRules
from .keys import analyze
from .values import (
    RAW_VALUE_FIELD,
    extract_available_fields,
    extract_sample_value,
    get_field_value,
    get_value_by_path,
    infer_value_type,
    is_date_value,
    is_url,
    value_to_string,
)

__all__ = [
    "COMMON_PREFIXES",
    "IDENTIFIER_RULES",
    "RAW_VALUE_FIELD",
    "IdentifierField",
    "IgnoreRules",
    "analyze",
    "analyze_fields_for_identifiers",
    "classify",
    "context_prefixes",
    "detect_all",
    "extract_available_fields",
    "extract_sample_value",
    "get_field_value",
    "get_value_by_path",
    "identifier_property",
    "infer_value_type",
    "is_date_value",
    "is_url",
    "linked_data_uri",
    "value_to_string",
]
