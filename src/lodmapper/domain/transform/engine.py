"""Pipeline execution for transformation blocks.

Blocks run strictly in order over a string value. A block that cannot run (bad
config, missing sub-field, invalid regex) never raises: it records a
:class:`BlockError`, passes the previous value on unchanged, and marks the result
as incomplete so callers can still show a best-effort value.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, assert_never

from lodmapper.domain.analysis.values import get_value_by_path, value_to_string
from lodmapper.domain.model import BlockType

from .blocks import convert_replacement, regex_flags, validate_block

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from lodmapper.domain.model import TransformationBlock

log = getLogger(__name__)

_VALUE_TOKEN = re.compile(r"\{\{\s*value\s*\}\}")
_FIELD_TOKEN = re.compile(r"\{\{\s*field:([^}]+?)\s*\}\}")


@dataclass(slots=True, frozen=True)
class BlockError:
    block_id: str
    block_type: BlockType
    message: str


@dataclass(slots=True, frozen=True)
class PipelineStep:
    block_id: str | None
    value: str
    error: BlockError | None = None


@dataclass(slots=True, frozen=True)
class PipelineResult:
    value: str
    steps: tuple[PipelineStep, ...]
    language: str | None = None
    errors: tuple[BlockError, ...] = ()

    @property
    def incomplete(self) -> bool:
        return bool(self.errors)


class _BlockFailure(Exception):
    pass


class _PartialResult(_BlockFailure):
    """Failure that still produced a usable best-effort value."""

    def __init__(self, value: str, message: str) -> None:
        super().__init__(message)
        self.value = value


@dataclass(slots=True)
class _Context:
    raw: object
    source: Mapping[str, object] | None
    language: str | None = None


def apply(
    pipeline: Iterable[TransformationBlock],
    raw_value: object,
    *,
    source: Mapping[str, object] | None = None,
) -> PipelineResult:
    """Derive a value from ``raw_value`` by running ``pipeline`` in order.

    ``source`` is the whole record; compose blocks read ``{{field:path}}`` from it
    (falling back to the raw value when no record is given).
    """

    context = _Context(raw=raw_value, source=source)
    current = value_to_string(raw_value)
    steps = [PipelineStep(block_id=None, value=current)]
    errors: list[BlockError] = []

    for block in pipeline:
        try:
            current = _apply_block(block, current, context)
        except _BlockFailure as exc:
            if isinstance(exc, _PartialResult):
                current = exc.value
            error = BlockError(block_id=block.block_id, block_type=block.type, message=str(exc))
            errors.append(error)
            steps.append(PipelineStep(block_id=block.block_id, value=current, error=error))
            log.debug("Block %s (%s) failed: %s", block.block_id, block.type, exc)
            continue
        steps.append(PipelineStep(block_id=block.block_id, value=current))

    return PipelineResult(
        value=current,
        steps=tuple(steps),
        language=context.language,
        errors=tuple(errors),
    )


def _apply_block(block: TransformationBlock, value: str, context: _Context) -> str:
    problems = validate_block(block)
    if problems:
        raise _BlockFailure("; ".join(problems))

    config = block.config
    match block.type:
        case BlockType.PREFIX:
            return f"{config['text']}{value}" if value else value
        case BlockType.SUFFIX:
            return f"{value}{config['text']}" if value else value
        case BlockType.FIND_REPLACE:
            return _find_replace(value, config) if value else value
        case BlockType.COMPOSE:
            return _compose(value, str(config["pattern"]), context)
        case BlockType.REGEX:
            return _regex(value, config) if value else value
        case BlockType.EXTRACT:
            return _extract(str(config["path"]), context)
        case BlockType.LANGUAGE:
            context.language = str(config["language"]).lower()
            return value
        case _:
            assert_never(block.type)


def _find_replace(value: str, config: Mapping[str, object]) -> str:
    pattern = re.escape(str(config["find"]))
    if config.get("whole_word"):
        pattern = rf"\b{pattern}\b"
    flags = re.NOFLAG if config.get("case_sensitive") else re.IGNORECASE
    replacement = str(config.get("replace", ""))
    return re.sub(pattern, lambda _match: replacement, value, flags=flags)


def _compose(value: str, pattern: str, context: _Context) -> str:
    missing: list[str] = []
    lookup_root: object = context.source if context.source is not None else context.raw

    def field_value(match: re.Match[str]) -> str:
        path = match.group(1).strip()
        found = get_value_by_path(lookup_root, path)
        if found is None:
            missing.append(path)
            return ""
        return value_to_string(found)

    result = _FIELD_TOKEN.sub(field_value, _VALUE_TOKEN.sub(lambda _match: value, pattern))
    if missing:
        raise _PartialResult(result, f"Missing field(s): {', '.join(missing)}")
    return result


def _regex(value: str, config: Mapping[str, object]) -> str:
    flags, replace_all = regex_flags(config.get("flags"))
    try:
        compiled = re.compile(str(config["pattern"]), flags)
        replacement = convert_replacement(str(config.get("replacement", "")), compiled.groups)
        return compiled.sub(replacement, value, count=0 if replace_all else 1)
    except (re.error, IndexError) as exc:
        raise _BlockFailure(f"Regex failed: {exc}") from exc


def _extract(path: str, context: _Context) -> str:
    found = get_value_by_path(context.raw, path)
    if found is None and isinstance(context.raw, list) and context.raw:
        found = get_value_by_path(context.raw[0], path)
    if found is None:
        raise _BlockFailure(f"Missing sub-field: {path}")
    return value_to_string(found)
