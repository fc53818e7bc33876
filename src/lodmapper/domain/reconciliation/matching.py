"""Constraint-aware ranking of entity candidates."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from .validators import check_format

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lodmapper.domain.model import MatchRef, PropertyRef

TYPE_MISMATCH_FACTOR = 0.7
FORMAT_VIOLATION_FACTOR = 0.8
FORMAT_PASSED_FACTOR = 1.1
ITEM_DATATYPE_FACTOR = 1.1


def constraint_factor(match: MatchRef, prop: PropertyRef, original_value: str) -> float:
    """Multiplier (in percent) the property's constraints apply to ``match``."""

    score = 100.0
    value_types = prop.constraints.value_type
    if value_types:
        wanted = set(prop.constraints.value_type_classes())
        if not wanted.intersection(match.types):
            score *= TYPE_MISMATCH_FACTOR

    check = check_format(original_value, prop)
    if not check.valid:
        score *= FORMAT_VIOLATION_FACTOR
    elif check.passed:
        score *= FORMAT_PASSED_FACTOR

    if prop.datatype == "wikibase-item" and match.id and match.id.startswith("Q"):
        score *= ITEM_DATATYPE_FACTOR
    return score


def score_match(match: MatchRef, prop: PropertyRef, original_value: str) -> MatchRef:
    """Return ``match`` with its score adjusted by constraints, capped at 100."""

    factor = constraint_factor(match, prop, original_value)
    adjusted = min(100.0, (match.score or 0.0) * factor / 100)
    return replace(match, score=round(adjusted, 2))


def rank_matches(
    matches: Iterable[MatchRef],
    prop: PropertyRef,
    original_value: str,
) -> list[MatchRef]:
    scored = [score_match(match, prop, original_value) for match in matches]
    return sorted(scored, key=lambda match: match.score or 0.0, reverse=True)
