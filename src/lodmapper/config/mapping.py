"""Mapping-step configuration: which source keys are ignored up front.

The ignore list is an external JSON document shaped like
``{"ignoredKeyPatterns": ["o:", "@context"]}``. A pattern ending in ``:`` ignores
every key with that prefix, anything else must match the key exactly.

The file is read on every call. A missing, unreadable or malformed file never
fails a run; the built-in defaults are used instead.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from logging import getLogger
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .env import optional_env_var

log = getLogger(__name__)

DEFAULT_IGNORED_KEY_PATTERNS: tuple[str, ...] = ("o:",)


class IgnoreKeysDocument(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ignored_key_patterns: list[str] = Field(alias="ignoredKeyPatterns")


@dataclass(frozen=True, slots=True)
class MappingConfig:
    ignored_key_patterns: tuple[str, ...] = DEFAULT_IGNORED_KEY_PATTERNS
    source: Path | None = None
    from_defaults: bool = True


def load_ignored_key_patterns(path: Path | None) -> tuple[tuple[str, ...], bool]:
    """Return ``(patterns, from_defaults)`` for the given ignore-list file."""

    if path is None:
        return DEFAULT_IGNORED_KEY_PATTERNS, True

    try:
        raw = path.read_text(encoding="utf-8")
        document = IgnoreKeysDocument.model_validate(json.loads(raw))
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        log.warning("Could not load ignore-key patterns from %s, using defaults: %s", path, exc)
        return DEFAULT_IGNORED_KEY_PATTERNS, True

    patterns = tuple(pattern for pattern in document.ignored_key_patterns if pattern.strip())
    log.debug("Loaded %d ignore-key patterns from %s", len(patterns), path)
    return patterns, False


def get_mapping_config(*, ignore_file: Path | None = None) -> MappingConfig:
    if ignore_file is None:
        configured = optional_env_var("LODMAPPER_IGNORE_KEYS")
        ignore_file = Path(configured).expanduser() if configured else None

    patterns, from_defaults = load_ignored_key_patterns(ignore_file)
    return MappingConfig(
        ignored_key_patterns=patterns,
        source=ignore_file,
        from_defaults=from_defaults,
    )
