"""Wikidata and reconciliation-service response schemas."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

type EntityId = str  # Q or P followed by digits
type LanguageCode = str


class WikidataBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "Wikidata %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class WikidataError(WikidataBaseModel):
    code: str
    info: str | None = None


class WikidataEnvelope(WikidataBaseModel):
    """Fields every ``api.php`` response may carry next to its payload."""

    error: WikidataError | None = None
    success: int | None = None
    servedby: str | None = None


# --------------------------------------------------------------- entity search


class SearchDisplayText(WikidataBaseModel):
    value: str
    language: LanguageCode


class SearchDisplay(WikidataBaseModel):
    label: SearchDisplayText | None = None
    description: SearchDisplayText | None = None


class SearchHit(WikidataBaseModel):
    id: EntityId
    label: str | None = None
    description: str | None = None
    concepturi: str | None = None
    url: str | None = None
    title: str | None = None
    pageid: int | None = None
    repository: str | None = None
    display: SearchDisplay | None = None
    match: dict[str, str] | None = None
    aliases: list[str] | None = None


class SearchEntitiesResponse(WikidataEnvelope):
    search: list[SearchHit] = Field(default_factory=list)
    searchinfo: dict[str, str] | None = None
    search_continue: int | None = Field(default=None, alias="search-continue")


# ------------------------------------------------------------ claims & entities


class DataValue(WikidataBaseModel):
    value: object = None
    type: str | None = None


class Snak(WikidataBaseModel):
    snaktype: str | None = None
    property: EntityId | None = None
    hash: str | None = None
    datavalue: DataValue | None = None
    datatype: str | None = None


class Claim(WikidataBaseModel):
    id: str | None = None
    type: str | None = None
    rank: str = "normal"
    mainsnak: Snak
    qualifiers: dict[EntityId, list[Snak]] = Field(default_factory=dict)
    qualifiers_order: list[EntityId] | None = Field(default=None, alias="qualifiers-order")
    references: list[dict[str, object]] | None = None


class ClaimsResponse(WikidataEnvelope):
    claims: dict[EntityId, list[Claim]] = Field(default_factory=dict)


class TermValue(WikidataBaseModel):
    language: LanguageCode
    value: str
    for_language: LanguageCode | None = Field(default=None, alias="for-language")


class Entity(WikidataBaseModel):
    id: EntityId
    type: str | None = None
    datatype: str | None = None
    missing: str | None = None
    pageid: int | None = None
    ns: int | None = None
    title: str | None = None
    lastrevid: int | None = None
    modified: str | None = None
    labels: dict[LanguageCode, TermValue] = Field(default_factory=dict)
    descriptions: dict[LanguageCode, TermValue] = Field(default_factory=dict)
    aliases: dict[LanguageCode, list[TermValue]] = Field(default_factory=dict)
    claims: dict[EntityId, list[Claim]] = Field(default_factory=dict)

    @property
    def is_missing(self) -> bool:
        return self.missing is not None

    def label(self, language: LanguageCode) -> str | None:
        term = self.labels.get(language)
        return term.value if term else None

    def description(self, language: LanguageCode) -> str | None:
        term = self.descriptions.get(language)
        return term.value if term else None


class EntitiesResponse(WikidataEnvelope):
    entities: dict[EntityId, Entity] = Field(default_factory=dict)


# ------------------------------------------------------------- language search


class LanguageSearchResponse(WikidataEnvelope):
    # code -> label in the requested UI language
    languagesearch: dict[LanguageCode, str] = Field(default_factory=dict)


# ------------------------------------------------------- reconciliation service


class ReconcileType(WikidataBaseModel):
    id: EntityId
    name: str | None = None


class ReconcileCandidate(WikidataBaseModel):
    id: EntityId
    name: str | None = None
    description: str | None = None
    score: float | None = None
    match: bool | None = None
    type: list[ReconcileType] = Field(default_factory=list)
    features: list[dict[str, object]] | None = None


class ReconcileQueryResult(WikidataBaseModel):
    result: list[ReconcileCandidate] = Field(default_factory=list)
