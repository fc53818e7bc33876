"""Wikidata API and reconciliation-service client."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from lodmapper.adapters.http_resilience import ResilientClient, decode_json
from lodmapper.domain.ports import EntitySearchError, LookupFailure, PropertyLookupError

from .schema import (
    ClaimsResponse,
    EntitiesResponse,
    LanguageSearchResponse,
    ReconcileQueryResult,
    SearchEntitiesResponse,
    WikidataEnvelope,
)
from .translator import (
    PROPERTY_CONSTRAINT,
    constraint_class_ids,
    entity_labels,
    translate_constraints,
    translate_languages,
    translate_property,
    translate_reconcile_candidates,
    translate_search_hit,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from lodmapper.adapters.http_resilience import ClientFactory
    from lodmapper.config.wikidata import WikidataConfig
    from lodmapper.domain.model import LanguageRef, MatchRef, PropertyConstraints, PropertyRef

    from .schema import Claim

log = getLogger(__name__)

# wbgetentities accepts at most 50 ids per request
LABEL_CHUNK_SIZE = 50


class WikidataAPIError(LookupFailure):
    """Raised when Wikidata or the reconciliation service returns an unusable response."""


class WikidataClient:
    """Async client implementing the entity, property and language lookup ports."""

    def __init__(
        self,
        *,
        config: WikidataConfig,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    @property
    def language(self) -> str:
        return self._config.language

    # ------------------------------------------------------------- entities

    async def search_entities(
        self,
        query: str,
        *,
        language: str = "en",
        limit: int = 10,
        type_ids: tuple[str, ...] = (),
    ) -> list[MatchRef]:
        """Reconciliation service first, ``wbsearchentities`` when it fails or finds nothing."""

        if not query.strip():
            return []
        try:
            matches = await self.reconcile(query, type_ids=type_ids, limit=limit)
        except WikidataAPIError as exc:
            log.warning("Reconciliation failed for %r, using entity search: %s", query, exc)
        else:
            if matches:
                return matches
        try:
            return await self.wbsearch(query, language=language, limit=limit)
        except WikidataAPIError as exc:
            raise EntitySearchError(f"Entity search failed for {query!r}: {exc}") from exc

    async def reconcile(
        self,
        query: str,
        *,
        type_ids: tuple[str, ...] = (),
        limit: int = 10,
    ) -> list[MatchRef]:
        urls = [self._config.reconcile_url]
        if self._config.reconcile_fallback_url:
            urls.append(self._config.reconcile_fallback_url)

        payload: dict[str, object] = {"query": query, "limit": limit, "properties": []}
        if len(type_ids) == 1:
            payload["type"] = type_ids[0]
        elif type_ids:
            payload["type"] = list(type_ids)
        form = {"queries": json.dumps({"q1": payload})}

        last_error: WikidataAPIError | None = None
        async with self._client_factory(self._resilience) as client:
            for url in urls:
                try:
                    return await self._reconcile_at(client, url, form)
                except WikidataAPIError as exc:
                    log.debug("Reconciliation endpoint %s failed: %s", url, exc)
                    last_error = exc
        raise last_error or WikidataAPIError("No reconciliation endpoint configured")

    async def _reconcile_at(
        self, client: ResilientClient, url: str, form: dict[str, str]
    ) -> list[MatchRef]:
        try:
            response = await client.post(url, data=form)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise WikidataAPIError(f"Reconciliation request failed: {exc}") from exc
        payload = _json_object(response, source="Reconciliation service")
        result = payload.get("q1")
        if not isinstance(result, dict):
            raise WikidataAPIError("Reconciliation response is missing the query result")
        try:
            parsed = ReconcileQueryResult.model_validate(result)
        except ValidationError as exc:
            raise WikidataAPIError(f"Unexpected reconciliation payload: {exc}") from exc
        return translate_reconcile_candidates(parsed.result)

    async def wbsearch(
        self,
        query: str,
        *,
        language: str = "en",
        limit: int = 10,
        entity_type: str = "item",
    ) -> list[MatchRef]:
        params = {
            "action": "wbsearchentities",
            "search": query,
            "language": language,
            "uselang": language,
            "type": entity_type,
            "limit": str(limit),
            "format": "json",
        }
        async with self._client_factory(self._resilience) as client:
            response = await self._api_get(client, params, SearchEntitiesResponse)
        return [translate_search_hit(hit) for hit in response.search]

    async def fetch_entity_labels(self, entity_ids: Sequence[str]) -> dict[str, str]:
        if not entity_ids:
            return {}
        async with self._client_factory(self._resilience) as client:
            return await self._labels(client, entity_ids)

    async def _labels(self, client: ResilientClient, entity_ids: Sequence[str]) -> dict[str, str]:
        labels: dict[str, str] = {}
        for start in range(0, len(entity_ids), LABEL_CHUNK_SIZE):
            chunk = entity_ids[start : start + LABEL_CHUNK_SIZE]
            params = {
                "action": "wbgetentities",
                "ids": "|".join(chunk),
                "props": "labels",
                "languages": self.language,
                "format": "json",
            }
            response = await self._api_get(client, params, EntitiesResponse)
            labels.update(entity_labels(response.entities, chunk, language=self.language))
        return labels

    # ----------------------------------------------------------- properties

    async def get_property(self, property_id: str) -> PropertyRef:
        """Property metadata plus constraints; raises :class:`PropertyLookupError`."""

        async with self._client_factory(self._resilience) as client:
            try:
                response = await self._api_get(
                    client,
                    {
                        "action": "wbgetentities",
                        "ids": property_id,
                        "props": "datatype|labels|descriptions|claims",
                        "languages": self.language,
                        "format": "json",
                    },
                    EntitiesResponse,
                )
                entity = response.entities.get(property_id)
                if entity is None or entity.is_missing:
                    raise PropertyLookupError(property_id, "property does not exist")
                constraints = await self._constraints(client, property_id)
            except WikidataAPIError as exc:
                raise PropertyLookupError(property_id, str(exc)) from exc

        prop = translate_property(entity, language=self.language, constraints=constraints)
        log.debug(
            "Loaded %s (%s): %d format, %d value-type constraints",
            prop.id,
            prop.datatype,
            len(constraints.format),
            len(constraints.value_type),
        )
        return prop

    async def get_property_constraints(self, property_id: str) -> PropertyConstraints:
        async with self._client_factory(self._resilience) as client:
            try:
                return await self._constraints(client, property_id)
            except WikidataAPIError as exc:
                raise PropertyLookupError(property_id, str(exc)) from exc

    async def _constraints(self, client: ResilientClient, property_id: str) -> PropertyConstraints:
        response = await self._api_get(
            client,
            {
                "action": "wbgetclaims",
                "entity": property_id,
                "property": PROPERTY_CONSTRAINT,
                "format": "json",
            },
            ClaimsResponse,
        )
        claims: list[Claim] = response.claims.get(PROPERTY_CONSTRAINT, [])
        class_ids = constraint_class_ids(claims)
        labels: dict[str, str] = {}
        if class_ids:
            try:
                labels = await self._labels(client, class_ids)
            except WikidataAPIError as exc:
                # constraints stay usable with bare class ids
                log.warning("Could not load class labels for %s: %s", property_id, exc)
        return translate_constraints(claims, language=self.language, class_labels=labels)

    # ------------------------------------------------------------ languages

    async def search_languages(self, query: str, *, limit: int = 10) -> list[LanguageRef]:
        if not query.strip():
            return []
        params = {
            "action": "languagesearch",
            "search": query,
            "uselang": self.language,
            "formatversion": "2",
            "format": "json",
        }
        async with self._client_factory(self._resilience) as client:
            response = await self._api_get(client, params, LanguageSearchResponse)
        return translate_languages(response.languagesearch, limit=limit)

    # -------------------------------------------------------------- helpers

    async def _api_get[M: WikidataEnvelope](
        self,
        client: ResilientClient,
        params: dict[str, str],
        model: type[M],
    ) -> M:
        action = params.get("action", "?")
        try:
            response = await client.get(self._config.api_url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise WikidataAPIError(f"Wikidata {action} request failed: {exc}") from exc

        payload = _json_object(response, source=f"Wikidata {action}")
        try:
            parsed = model.model_validate(payload)
        except ValidationError as exc:
            raise WikidataAPIError(f"Unexpected Wikidata {action} payload: {exc}") from exc
        if parsed.error is not None:
            raise WikidataAPIError(
                f"Wikidata {action} error {parsed.error.code}: {parsed.error.info or ''}".rstrip()
            )
        return parsed


def _json_object(response: httpx.Response, *, source: str) -> dict[str, object]:
    try:
        payload = decode_json(response, source=source)
    except ValueError as exc:
        raise WikidataAPIError(str(exc)) from exc
    if not isinstance(payload, dict):
        raise WikidataAPIError(f"Unexpected {source} response payload")
    return payload
