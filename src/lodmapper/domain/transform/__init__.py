"""Value transformation pipelines."""

from __future__ import annotations

from .blocks import (
    BLOCK_METADATA,
    COMMON_REGEX_PATTERNS,
    BlockMetadata,
    RegexPreset,
    TransformationConfigError,
    convert_replacement,
    create_block,
    preset_block,
    regex_flags,
    validate_block,
)
from .editing import (
    BlockNotFoundError,
    BlockSequence,
    insert_block,
    move_block,
    remove_block,
    replace_block,
)
from .engine import BlockError, PipelineResult, PipelineStep, apply
from .fields import FieldPath, extract_all_fields, search_fields

__all__ = [
    "BLOCK_METADATA",
    "COMMON_REGEX_PATTERNS",
    "BlockError",
    "BlockMetadata",
    "BlockNotFoundError",
    "BlockSequence",
    "FieldPath",
    "PipelineResult",
    "PipelineStep",
    "RegexPreset",
    "TransformationConfigError",
    "apply",
    "convert_replacement",
    "create_block",
    "extract_all_fields",
    "insert_block",
    "move_block",
    "preset_block",
    "regex_flags",
    "remove_block",
    "replace_block",
    "search_fields",
    "validate_block",
]
