"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class KeyCategory(StrEnum):
    """Where a source key currently sits in the mapping step."""

    NON_LINKED = "non-linked"
    MAPPED = "mapped"
    IGNORED = "ignored"


class ValueType(StrEnum):
    """Coarse value shape observed for a source key."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    LINK = "link"
    NESTED = "nested"


class IdentifierType(StrEnum):
    ARK = "ark"
    VIAF = "viaf"
    GEONAMES = "geonames"
    LOC = "loc"
    ORCID = "orcid"
    DOI = "doi"
    OCLC = "oclc"
    ISBN_13 = "isbn-13"
    ISBN_10 = "isbn-10"
    ISSN = "issn"
    ISNI = "isni"
    HANDLE = "handle"

    # Recognized links that do not map to an external-id property
    WIKIDATA = "wikidata"
    ITEM_LINK = "item-link"

    UNKNOWN = "unknown"


class ValueKind(StrEnum):
    """Closed set of reconciliation paths, selected by the property datatype."""

    ENTITY = "entity"
    STRING = "string"
    MONOLINGUAL_TEXT = "monolingual-text"
    EXTERNAL_ID = "external-id"
    URL = "url"
    TIME = "time"
    UNSUPPORTED = "unsupported"


class ReconciliationStatus(StrEnum):
    PENDING = "pending"
    RECONCILED = "reconciled"
    SKIPPED = "skipped"


class MatchType(StrEnum):
    ENTITY = "entity"
    CUSTOM = "custom"


class ReferenceType(StrEnum):
    BACK_LINK = "back-link"
    BIBLIOGRAPHIC = "bibliographic"
    PERSISTENT_ID = "persistent-id"
    CUSTOM = "custom"


class BlockType(StrEnum):
    """Transformation block kinds, in the order they are offered to users."""

    PREFIX = "prefix"
    SUFFIX = "suffix"
    FIND_REPLACE = "find_replace"
    COMPOSE = "compose"
    REGEX = "regex"
    EXTRACT = "extract"
    LANGUAGE = "language"


class ConstraintStatus(StrEnum):
    MANDATORY = "mandatory"
    SUGGESTION = "suggestion"
    NORMAL = "normal"


class TimePrecision(StrEnum):
    DECADE = "decade"
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
