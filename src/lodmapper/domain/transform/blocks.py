"""Transformation block construction, validation and presets."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from lodmapper.domain.model import BlockType, TransformationBlock

if TYPE_CHECKING:
    from collections.abc import Mapping


class TransformationConfigError(ValueError):
    """Raised when a block cannot be created from the given type or config."""


@dataclass(slots=True, frozen=True)
class BlockMetadata:
    name: str
    description: str
    default_config: Mapping[str, object]


BLOCK_METADATA: Final[dict[BlockType, BlockMetadata]] = {
    BlockType.PREFIX: BlockMetadata(
        name="Add Prefix",
        description="Add text to the beginning of the value",
        default_config={"text": ""},
    ),
    BlockType.SUFFIX: BlockMetadata(
        name="Add Suffix",
        description="Add text to the end of the value",
        default_config={"text": ""},
    ),
    BlockType.FIND_REPLACE: BlockMetadata(
        name="Find & Replace",
        description="Find and replace text in the value",
        default_config={"find": "", "replace": "", "case_sensitive": False, "whole_word": False},
    ),
    BlockType.COMPOSE: BlockMetadata(
        name="Compose",
        description="Combine the value with other fields and fixed text",
        default_config={"pattern": "{{value}}"},
    ),
    BlockType.REGEX: BlockMetadata(
        name="Regular Expression",
        description="Advanced pattern matching and transformation",
        default_config={"pattern": "", "replacement": "", "flags": "g"},
    ),
    BlockType.EXTRACT: BlockMetadata(
        name="Extract Field",
        description="Use one sub-field of the raw value",
        default_config={"path": "@value"},
    ),
    BlockType.LANGUAGE: BlockMetadata(
        name="Language Tag",
        description="Attach a language to the value",
        default_config={"language": ""},
    ),
}

_SAFE_FLAGS: Final[dict[str, re.RegexFlag]] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": re.UNICODE,
}
_LANGUAGE_CODE_RE = re.compile(r"^[a-z]{2,3}(?:-[a-z0-9]{2,8})*$", re.IGNORECASE)
_JS_REPLACEMENT_RE = re.compile(r"\$(\$|&|\d{1,2})")


def create_block(block_type: BlockType | str, /, **config: object) -> TransformationBlock:
    try:
        resolved = BlockType(block_type)
    except ValueError as exc:
        raise TransformationConfigError(f"Invalid block type: {block_type}") from exc
    merged = {**BLOCK_METADATA[resolved].default_config, **config}
    return TransformationBlock(type=resolved, config=merged)


def regex_flags(flags: object) -> tuple[re.RegexFlag, bool]:
    """Translate JS-style flags; returns ``(re flags, replace_all)``.

    Unknown flags are dropped. An empty or invalid flag string behaves like ``g``.
    """

    if not isinstance(flags, str) or not flags:
        return re.NOFLAG, True
    compiled = re.NOFLAG
    replace_all = False
    known = False
    for flag in flags.lower():
        if flag == "g":
            replace_all = True
            known = True
        elif flag in _SAFE_FLAGS:
            compiled |= _SAFE_FLAGS[flag]
            known = True
    if not known:
        return re.NOFLAG, True
    return compiled, replace_all


def convert_replacement(replacement: str, groups: int | None = None) -> str:
    """Turn ``$1``/``$&``/``$$`` replacement syntax into :func:`re.sub` syntax.

    With ``groups`` given, a reference to a group the pattern lacks stays literal
    text and ``$10`` reads as ``$1`` followed by ``0`` when there is no group 10.
    """

    escaped = replacement.replace("\\", "\\\\")

    def substitute(match: re.Match[str]) -> str:
        token = match.group(1)
        if token == "$":
            return "$"
        if token == "&":
            return r"\g<0>"
        if groups is None or 1 <= int(token) <= groups:
            return rf"\g<{int(token)}>"
        if len(token) == 2 and 1 <= int(token[0]) <= groups:
            return rf"\g<{token[0]}>{token[1]}"
        return match.group(0)

    return _JS_REPLACEMENT_RE.sub(substitute, escaped)


def is_language_code(value: object) -> bool:
    return isinstance(value, str) and bool(_LANGUAGE_CODE_RE.match(value))


def validate_block(block: TransformationBlock) -> list[str]:
    """Return human readable problems with ``block``; empty when valid."""

    errors: list[str] = []
    config = block.config
    match block.type:
        case BlockType.PREFIX | BlockType.SUFFIX:
            if not isinstance(config.get("text"), str):
                errors.append("Text must be a string")
        case BlockType.FIND_REPLACE:
            find = config.get("find")
            if not isinstance(find, str):
                errors.append("Find text must be a string")
            elif not find:
                errors.append("Find text is required")
            if not isinstance(config.get("replace", ""), str):
                errors.append("Replace text must be a string")
        case BlockType.COMPOSE:
            if not isinstance(config.get("pattern"), str):
                errors.append("Pattern must be a string")
        case BlockType.REGEX:
            pattern = config.get("pattern")
            if not isinstance(pattern, str):
                errors.append("Regex pattern must be a string")
            elif not pattern:
                errors.append("Regex pattern is required")
            else:
                flags, _ = regex_flags(config.get("flags"))
                try:
                    re.compile(pattern, flags)
                except re.error:
                    errors.append("Invalid regex pattern")
            if not isinstance(config.get("replacement", ""), str):
                errors.append("Replacement must be a string")
        case BlockType.EXTRACT:
            path = config.get("path")
            if not isinstance(path, str) or not path.strip():
                errors.append("Field path is required")
        case BlockType.LANGUAGE:
            if not is_language_code(config.get("language")):
                errors.append("A valid language code is required")
    return errors


@dataclass(slots=True, frozen=True)
class RegexPreset:
    pattern: str
    replacement: str
    description: str


COMMON_REGEX_PATTERNS: Final[dict[str, RegexPreset]] = {
    "Extract Year": RegexPreset(
        pattern=r"^.*?\b(\d{4})\b.*$",
        replacement="$1",
        description="Extract 4-digit year from text",
    ),
    "Remove HTML Tags": RegexPreset(
        pattern=r"<[^>]*>",
        replacement="",
        description="Remove all HTML tags from text",
    ),
    "Remove Special Characters": RegexPreset(
        pattern=r"[^a-zA-Z0-9\s]",
        replacement="",
        description="Remove special characters, keep only letters, numbers and spaces",
    ),
    "Clean Whitespace": RegexPreset(
        pattern=r"\s+",
        replacement=" ",
        description="Replace multiple whitespace with single space",
    ),
    "Extract Parentheses Content": RegexPreset(
        pattern=r"^.*?\(([^)]+)\).*$",
        replacement="$1",
        description="Extract content from parentheses",
    ),
    "Remove Brackets": RegexPreset(
        pattern=r"[\[\]{}()]",
        replacement="",
        description="Remove all types of brackets",
    ),
}


def preset_block(name: str) -> TransformationBlock:
    preset = COMMON_REGEX_PATTERNS.get(name)
    if preset is None:
        raise TransformationConfigError(f"Unknown regex preset: {name}")
    return create_block(
        BlockType.REGEX,
        pattern=preset.pattern,
        replacement=preset.replacement,
        flags="g",
    )
