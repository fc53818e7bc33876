"""Identifier classification for source keys.

``classify`` runs an ordered list of pattern rules over a key's sample value and
reports the identifier family plus the external-id property it maps to. The first
matching rule wins. Links that are recognizable but have no external-id property
(knowledge-base entity links, back-links to the source API) are reported with
``property_id=None`` so the key stays non-linked.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from lodmapper.domain.model import (
    UNKNOWN_IDENTIFIER,
    IdentifierMatch,
    IdentifierType,
    PropertyRef,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lodmapper.domain.model import JsonObject

log = getLogger(__name__)

EXTERNAL_ID_DATATYPE = "external-id"


@dataclass(slots=True, frozen=True)
class IdentifierRule:
    type: IdentifierType
    pattern: re.Pattern[str]
    property_id: str | None
    label: str
    description: str
    confidence: float = 1.0
    normalize_before_match: bool = False

    def match(self, text: str) -> IdentifierMatch | None:
        candidate = re.sub(r"[-\s]", "", text) if self.normalize_before_match else text
        found = self.pattern.search(candidate)
        if found is None:
            return None
        groups = [group for group in found.groups() if group]
        return IdentifierMatch(
            type=self.type,
            property_id=self.property_id,
            label=self.label,
            description=self.description,
            value=groups[0] if groups else found.group(0),
            confidence=self.confidence,
        )


ARK_PATTERN = re.compile(r"ark:[\\/]?[0-9]+[\\/][0-9a-zA-Z._\-]+", re.IGNORECASE)
ARK_DESCRIPTION = (
    "identifier for a digital or physical object, conforming to the ARK identifier scheme"
)

IDENTIFIER_RULES: tuple[IdentifierRule, ...] = (
    IdentifierRule(
        type=IdentifierType.ARK,
        pattern=ARK_PATTERN,
        property_id="P8091",
        label="Archival Resource Key",
        description=ARK_DESCRIPTION,
    ),
    IdentifierRule(
        type=IdentifierType.VIAF,
        pattern=re.compile(r"viaf\.org/viaf/(\d+)|^viaf:(\d+)", re.IGNORECASE),
        property_id="P214",
        label="VIAF ID",
        description="identifier for the Virtual International Authority File database",
    ),
    IdentifierRule(
        type=IdentifierType.GEONAMES,
        pattern=re.compile(r"geonames\.org/(\d+)|^geonames:(\d+)", re.IGNORECASE),
        property_id="P1566",
        label="GeoNames ID",
        description="identifier in the GeoNames geographical database",
    ),
    IdentifierRule(
        type=IdentifierType.LOC,
        pattern=re.compile(
            r"id\.loc\.gov/authorities/\w+/([a-z]+\d+)|^loc:([a-z]+\d+)", re.IGNORECASE
        ),
        property_id="P244",
        label="Library of Congress authority ID",
        description=(
            "Library of Congress name authority (persons, families, corporate bodies, "
            "events, places, works and expressions)"
        ),
    ),
    IdentifierRule(
        type=IdentifierType.ORCID,
        pattern=re.compile(
            r"orcid\.org/(\d{4}-\d{4}-\d{4}-\d{3}[0-9X])|^orcid:(\d{4}-\d{4}-\d{4}-\d{3}[0-9X])",
            re.IGNORECASE,
        ),
        property_id="P496",
        label="ORCID iD",
        description="identifier for a person or organization in the ORCID registry",
    ),
    IdentifierRule(
        type=IdentifierType.DOI,
        pattern=re.compile(
            r"doi\.org/(10\.\d{4,}/[-._;()/:a-zA-Z0-9]+)|^doi:(10\.\d{4,}/[-._;()/:a-zA-Z0-9]+)",
            re.IGNORECASE,
        ),
        property_id="P356",
        label="DOI",
        description="serial code used to uniquely identify digital objects",
    ),
    IdentifierRule(
        type=IdentifierType.OCLC,
        pattern=re.compile(r"worldcat\.org/oclc/(\d+)|^oclc:(\d+)", re.IGNORECASE),
        property_id="P243",
        label="OCLC control number",
        description="identifier for a unique bibliographic record in OCLC WorldCat",
    ),
    IdentifierRule(
        type=IdentifierType.ISBN_13,
        pattern=re.compile(
            r"^(?:ISBN[-\s]?)?(?:97[89])[-\s]?\d{1,5}[-\s]?\d{1,7}[-\s]?\d{1,6}[-\s]?\d$",
            re.IGNORECASE,
        ),
        property_id="P212",
        label="ISBN-13",
        description="13-digit International Standard Book Number",
    ),
    IdentifierRule(
        type=IdentifierType.ISSN,
        pattern=re.compile(r"^(?:ISSN[-\s]?)?\d{4}[-\s]?\d{3}[\dX]$", re.IGNORECASE),
        property_id="P236",
        label="ISSN",
        description="International Standard Serial Number",
    ),
    IdentifierRule(
        type=IdentifierType.ISNI,
        pattern=re.compile(r"isni\.org/isni/(\d{15}[\dX])|^isni:(\d{15}[\dX])", re.IGNORECASE),
        property_id="P213",
        label="ISNI",
        description="International Standard Name Identifier",
    ),
    IdentifierRule(
        type=IdentifierType.HANDLE,
        pattern=re.compile(r"hdl\.handle\.net/(\d+/\S+)|^hdl:(\d+/\S+)", re.IGNORECASE),
        property_id="P1184",
        label="Handle ID",
        description="identifier for an item in the Handle system",
    ),
)

_ARK_FIELD_HINT = IdentifierRule(
    type=IdentifierType.ARK,
    pattern=re.compile(r"^.*ark:.*$", re.IGNORECASE),
    property_id="P8091",
    label="Archival Resource Key",
    description=ARK_DESCRIPTION,
    confidence=0.9,
)

_ISBN_10_RULE = IdentifierRule(
    type=IdentifierType.ISBN_10,
    pattern=re.compile(r"^(?:ISBN)?\d{9}[\dX]$", re.IGNORECASE),
    property_id="P957",
    label="ISBN-10",
    description="former 10-digit International Standard Book Number",
    confidence=0.95,
    normalize_before_match=True,
)

# Recognized, but not an external identifier of the described item
_LINK_RULES: tuple[IdentifierRule, ...] = (
    IdentifierRule(
        type=IdentifierType.WIKIDATA,
        pattern=re.compile(r"wikidata\.org/(?:wiki|entity)/([QP]\d+)", re.IGNORECASE),
        property_id=None,
        label="Wikidata entity",
        description="link to an existing knowledge-base entity",
    ),
    IdentifierRule(
        type=IdentifierType.ITEM_LINK,
        pattern=re.compile(r"/api/items/(\d+)"),
        property_id=None,
        label="Source item link",
        description="link back to a record in the source collection",
    ),
)


def identifier_text(value: object) -> str | None:
    """Pick the string an identifier would live in from a raw source value."""

    if isinstance(value, str):
        return value or None
    if isinstance(value, list):
        return identifier_text(value[0]) if value else None
    if isinstance(value, Mapping):
        for field in ("@value", "o:label", "@id", "value"):
            candidate = value.get(field)
            if candidate:
                return str(candidate)
    return None


def _classify_text(key: str, text: str) -> IdentifierMatch:
    for rule in IDENTIFIER_RULES:
        result = rule.match(text)
        if result is not None:
            return result

    lowered_key = key.lower()
    if ("identifier" in lowered_key or "ark" in lowered_key) and "ark:" in text.lower():
        hint = _ARK_FIELD_HINT.match(text)
        if hint is not None:
            return hint

    isbn_10 = _ISBN_10_RULE.match(text)
    if isbn_10 is not None:
        return isbn_10

    for rule in _LINK_RULES:
        result = rule.match(text)
        if result is not None:
            return result

    return UNKNOWN_IDENTIFIER


def classify(key: str, sample_value: object) -> IdentifierMatch:
    """Classify one sample value; unrecognized shapes come back as ``UNKNOWN``."""

    text = identifier_text(sample_value)
    if text is None:
        return UNKNOWN_IDENTIFIER
    # identifier rules anchor on the value, surrounding whitespace is noise
    return _classify_text(key, text.strip())


def detect_all(key: str, value: object) -> list[tuple[int, IdentifierMatch]]:
    """Classify every element of a multi-valued field, returning ``(index, match)`` hits."""

    values = value if isinstance(value, list) else [value]
    hits: list[tuple[int, IdentifierMatch]] = []
    for index, element in enumerate(values):
        result = classify(key, element)
        if result.recognized:
            hits.append((index, result))
    return hits


@dataclass(slots=True, frozen=True)
class IdentifierField:
    key: str
    detection: IdentifierMatch
    sample_value: object
    multiple_detected: bool


def analyze_fields_for_identifiers(records: Iterable[JsonObject]) -> dict[str, IdentifierField]:
    """Find, per key, the first record value that holds a mappable identifier."""

    fields: dict[str, IdentifierField] = {}
    for record in records:
        for key, value in record.items():
            if key.startswith("@") or key in fields:
                continue
            hits = [hit for hit in detect_all(key, value) if hit[1].mappable]
            if hits:
                fields[key] = IdentifierField(
                    key=key,
                    detection=hits[0][1],
                    sample_value=value,
                    multiple_detected=len(hits) > 1,
                )
    log.debug("Identifier fields detected: %s", ", ".join(sorted(fields)) or "none")
    return fields


def identifier_property(match: IdentifierMatch) -> PropertyRef:
    """Build the basic external-id property used before constraints are fetched."""

    if match.property_id is None:
        raise ValueError(f"{match.type} identifiers have no target property")
    return PropertyRef(
        id=match.property_id,
        label=match.label or match.property_id,
        description=match.description or "",
        datatype=EXTERNAL_ID_DATATYPE,
    )
