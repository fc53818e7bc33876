"""Translate Wikidata payloads into domain properties, constraints and matches."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from lodmapper.domain.model import (
    ConstraintStatus,
    FormatConstraint,
    LanguageRef,
    MatchRef,
    MatchType,
    OtherConstraint,
    PropertyConstraints,
    PropertyRef,
    ValueTypeConstraint,
    find_language,
)
from lodmapper.domain.reconciliation.batch import ENTITY_URL_TEMPLATE

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import Claim, Entity, ReconcileCandidate, SearchHit, Snak

PROPERTY_CONSTRAINT = "P2302"
FORMAT_AS_REGEX = "P1793"
SYNTAX_CLARIFICATION = "P2916"
CONSTRAINT_CLASS = "P2308"
CONSTRAINT_RELATION = "P2309"
CONSTRAINT_STATUS = "P2316"
FORMATTER_URL = "P1630"

FORMAT_CONSTRAINT = "Q21502404"
VALUE_TYPE_CONSTRAINT = "Q21503250"

# wbsearchentities ranks but does not score its hits
SEARCH_HIT_SCORE = 80.0
MIN_RANKED_SCORE = 10.0

_CONSTRAINT_STATUS_MAP: dict[str, ConstraintStatus] = {
    "Q21502408": ConstraintStatus.MANDATORY,
    "Q62026391": ConstraintStatus.SUGGESTION,
}


def _entity_id(snak: Snak) -> str | None:
    if snak.datavalue is None or not isinstance(snak.datavalue.value, Mapping):
        return None
    value = snak.datavalue.value
    entity_id = value.get("id")
    if isinstance(entity_id, str):
        return entity_id
    numeric = value.get("numeric-id")
    if isinstance(numeric, int):
        return f"Q{numeric}"
    return None


def _string_value(snak: Snak) -> str | None:
    if snak.datavalue is None:
        return None
    value = snak.datavalue.value
    return value if isinstance(value, str) else None


def _monolingual(snak: Snak) -> tuple[str, str] | None:
    if snak.datavalue is None or not isinstance(snak.datavalue.value, Mapping):
        return None
    text = snak.datavalue.value.get("text")
    language = snak.datavalue.value.get("language")
    if isinstance(text, str) and isinstance(language, str):
        return language, text
    return None


def _active(claims: Iterable[Claim]) -> list[Claim]:
    return [claim for claim in claims if claim.rank != "deprecated"]


def _status(claim: Claim) -> ConstraintStatus:
    for snak in claim.qualifiers.get(CONSTRAINT_STATUS, []):
        entity_id = _entity_id(snak)
        if entity_id in _CONSTRAINT_STATUS_MAP:
            return _CONSTRAINT_STATUS_MAP[entity_id]
    return ConstraintStatus.NORMAL


def _clarification(claim: Claim, language: str) -> str | None:
    texts = [
        text
        for snak in claim.qualifiers.get(SYNTAX_CLARIFICATION, [])
        if (text := _monolingual(snak)) is not None
    ]
    for text_language, text in texts:
        if text_language == language:
            return text
    return None


def constraint_class_ids(claims: Iterable[Claim]) -> list[str]:
    """Class ids referenced by value-type constraints, for label lookup."""

    seen: dict[str, None] = {}
    for claim in _active(claims):
        if _entity_id(claim.mainsnak) != VALUE_TYPE_CONSTRAINT:
            continue
        for snak in claim.qualifiers.get(CONSTRAINT_CLASS, []):
            class_id = _entity_id(snak)
            if class_id:
                seen.setdefault(class_id, None)
    return list(seen)


def translate_constraints(
    claims: Iterable[Claim],
    *,
    language: str = "en",
    class_labels: Mapping[str, str] | None = None,
) -> PropertyConstraints:
    """Fold ``P2302`` claims into format, value-type and other constraints.

    Deprecated claims are ignored. Class labels missing from ``class_labels``
    are simply left out.
    """

    labels = class_labels or {}
    formats: list[FormatConstraint] = []
    value_types: list[ValueTypeConstraint] = []
    other: list[OtherConstraint] = []

    for claim in _active(claims):
        constraint_id = _entity_id(claim.mainsnak)
        if constraint_id is None:
            continue
        status = _status(claim)
        if constraint_id == FORMAT_CONSTRAINT:
            description = _clarification(claim, language)
            for snak in claim.qualifiers.get(FORMAT_AS_REGEX, []):
                pattern = _string_value(snak)
                if pattern:
                    formats.append(
                        FormatConstraint(pattern=pattern, description=description, status=status)
                    )
        elif constraint_id == VALUE_TYPE_CONSTRAINT:
            classes = tuple(
                class_id
                for snak in claim.qualifiers.get(CONSTRAINT_CLASS, [])
                if (class_id := _entity_id(snak)) is not None
            )
            if not classes:
                continue
            relations = claim.qualifiers.get(CONSTRAINT_RELATION, [])
            value_types.append(
                ValueTypeConstraint(
                    classes=classes,
                    class_labels={cid: labels[cid] for cid in classes if cid in labels},
                    relation=_entity_id(relations[0]) if relations else None,
                    status=status,
                )
            )
        else:
            other.append(OtherConstraint(constraint_id=constraint_id, status=status))

    return PropertyConstraints(
        format=tuple(formats), value_type=tuple(value_types), other=tuple(other)
    )


def formatter_url(entity: Entity) -> str | None:
    for claim in _active(entity.claims.get(FORMATTER_URL, [])):
        url = _string_value(claim.mainsnak)
        if url:
            return url
    return None


def translate_property(
    entity: Entity,
    *,
    language: str = "en",
    constraints: PropertyConstraints | None = None,
) -> PropertyRef:
    """Build a :class:`PropertyRef`; passing ``constraints`` marks them as fetched."""

    return PropertyRef(
        id=entity.id,
        label=entity.label(language) or entity.id,
        description=entity.description(language) or "",
        datatype=entity.datatype or "string",
        constraints=constraints or PropertyConstraints(),
        formatter_url=formatter_url(entity),
        constraints_fetched=constraints is not None,
    )


def entity_labels(
    entities: Mapping[str, Entity], requested: Iterable[str], *, language: str = "en"
) -> dict[str, str]:
    """Label per requested id, falling back to the id itself."""

    labels: dict[str, str] = {}
    for entity_id in requested:
        entity = entities.get(entity_id)
        label = entity.label(language) if entity is not None else None
        labels[entity_id] = label or entity_id
    return labels


def translate_search_hit(hit: SearchHit) -> MatchRef:
    return MatchRef(
        type=MatchType.ENTITY,
        id=hit.id,
        label=hit.label or hit.id,
        description=hit.description,
        url=ENTITY_URL_TEMPLATE.format(id=hit.id),
        score=SEARCH_HIT_SCORE,
    )


def translate_reconcile_candidates(candidates: Iterable[ReconcileCandidate]) -> list[MatchRef]:
    """Candidates in service order; unscored ones get a score from their rank."""

    matches: list[MatchRef] = []
    for rank, candidate in enumerate(candidates):
        score = candidate.score
        if score is None:
            score = max(100.0 - rank * 10, MIN_RANKED_SCORE)
        matches.append(
            MatchRef(
                type=MatchType.ENTITY,
                id=candidate.id,
                label=candidate.name or candidate.id,
                description=candidate.description,
                url=ENTITY_URL_TEMPLATE.format(id=candidate.id),
                score=float(score),
                types=tuple(entry.id for entry in candidate.type),
            )
        )
    return matches


def translate_languages(found: Mapping[str, str], *, limit: int = 10) -> list[LanguageRef]:
    languages: list[LanguageRef] = []
    for code, label in list(found.items())[:limit]:
        known = find_language(code)
        languages.append(
            LanguageRef(
                code=code.lower(),
                label=label,
                native_label=known.native_label if known is not None else None,
            )
        )
    return languages
