from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from urllib.parse import parse_qs

import httpx
import pytest

from lodmapper.adapters.wikidata import WikidataClient
from lodmapper.config import ResilienceConfig, get_wikidata_config
from lodmapper.config.wikidata import DEFAULT_RECONCILE_URL, FALLBACK_RECONCILE_URL
from lodmapper.domain.model import ConstraintStatus
from lodmapper.domain.ports import EntitySearchError, PropertyLookupError
from tests.helpers.lookups import make_client_factory

type Handler = Callable[[httpx.Request], httpx.Response]


def _client(handler: Handler) -> WikidataClient:
    config = get_wikidata_config(resilience=ResilienceConfig(name="wikidata-test", cache=None))
    return WikidataClient(config=config, client_factory=make_client_factory(handler))


def _snak(value: object) -> dict[str, object]:
    return {"snaktype": "value", "datavalue": {"value": value}}


def _item(entity_id: str) -> dict[str, object]:
    return {"id": entity_id, "numeric-id": int(entity_id[1:]), "entity-type": "item"}


@pytest.fixture
def reconcile_payload() -> dict[str, object]:
    return {
        "q1": {
            "result": [
                {
                    "id": "Q130",
                    "name": "Joan Blaeu",
                    "score": 92.5,
                    "type": [{"id": "Q5", "name": "human"}],
                },
                {"id": "Q131", "name": "Willem Blaeu"},
            ]
        }
    }


def test_reconcile_posts_typed_query(reconcile_payload: dict[str, object]) -> None:
    sent: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        form = parse_qs(request.content.decode())
        sent.append(json.loads(form["queries"][0]))
        return httpx.Response(200, json=reconcile_payload)

    matches = asyncio.run(_client(handler).reconcile("Blaeu", type_ids=("Q5",), limit=5))

    assert sent == [{"q1": {"query": "Blaeu", "limit": 5, "properties": [], "type": "Q5"}}]
    assert [(match.id, match.score, match.types) for match in matches] == [
        ("Q130", 92.5, ("Q5",)),
        ("Q131", 90.0, ()),
    ]
    assert matches[0].url == "https://www.wikidata.org/wiki/Q130"


def test_reconcile_falls_back_to_second_endpoint(reconcile_payload: dict[str, object]) -> None:
    hosts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(str(request.url))
        if str(request.url) == DEFAULT_RECONCILE_URL:
            return httpx.Response(503)
        return httpx.Response(200, json=reconcile_payload)

    matches = asyncio.run(_client(handler).reconcile("Blaeu"))

    assert hosts == [DEFAULT_RECONCILE_URL, FALLBACK_RECONCILE_URL]
    assert len(matches) == 2


def test_search_entities_uses_entity_search_when_reconcile_is_empty() -> None:
    actions: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return httpx.Response(200, json={"q1": {"result": []}})
        actions.append(request.url.params.get("action"))
        return httpx.Response(
            200,
            json={"search": [{"id": "Q727", "label": "Amsterdam", "description": "capital"}]},
        )

    matches = asyncio.run(_client(handler).search_entities("Amsterdam", language="nl"))

    assert actions == ["wbsearchentities"]
    assert [(match.id, match.label, match.score) for match in matches] == [
        ("Q727", "Amsterdam", 80.0)
    ]


def test_search_entities_reports_failure_when_everything_fails() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(500)

    with pytest.raises(EntitySearchError):
        asyncio.run(_client(handler).search_entities("Amsterdam"))


def test_blank_queries_are_not_sent() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request {request.url}")

    client = _client(handler)

    assert asyncio.run(client.search_entities("  ")) == []
    assert asyncio.run(client.search_languages("")) == []


def test_get_property_loads_metadata_and_constraints() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if params["action"] == "wbgetclaims":
            assert params["entity"] == "P50"
            return httpx.Response(
                200,
                json={
                    "claims": {
                        "P2302": [
                            {
                                "mainsnak": _snak(_item("Q21503250")),
                                "qualifiers": {
                                    "P2308": [_snak(_item("Q5"))],
                                    "P2316": [_snak(_item("Q21502408"))],
                                },
                            },
                            {
                                "rank": "deprecated",
                                "mainsnak": _snak(_item("Q21502404")),
                                "qualifiers": {"P1793": [_snak("[a-z]+")]},
                            },
                        ]
                    }
                },
            )
        if params["ids"] == "Q5":
            return httpx.Response(
                200,
                json={
                    "entities": {
                        "Q5": {"id": "Q5", "labels": {"en": {"language": "en", "value": "human"}}}
                    }
                },
            )
        return httpx.Response(
            200,
            json={
                "entities": {
                    "P50": {
                        "id": "P50",
                        "datatype": "wikibase-item",
                        "labels": {"en": {"language": "en", "value": "author"}},
                        "descriptions": {"en": {"language": "en", "value": "main creator"}},
                    }
                }
            },
        )

    prop = asyncio.run(_client(handler).get_property("P50"))

    assert (prop.id, prop.label, prop.datatype) == ("P50", "author", "wikibase-item")
    assert prop.constraints_fetched
    assert prop.constraints.format == ()
    (value_type,) = prop.constraints.value_type
    assert value_type.classes == ("Q5",)
    assert value_type.class_labels == {"Q5": "human"}
    assert value_type.status is ConstraintStatus.MANDATORY


def test_missing_property_raises_lookup_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(200, json={"entities": {"P0": {"id": "P0", "missing": ""}}})

    with pytest.raises(PropertyLookupError) as excinfo:
        asyncio.run(_client(handler).get_property("P0"))

    assert excinfo.value.property_id == "P0"


def test_api_error_payload_becomes_lookup_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(
            200, json={"error": {"code": "no-such-entity", "info": "Could not find"}}
        )

    with pytest.raises(PropertyLookupError, match="no-such-entity"):
        asyncio.run(_client(handler).get_property("P99999999"))


def test_search_languages_translates_codes() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["action"] == "languagesearch"
        return httpx.Response(
            200, json={"languagesearch": {"nl": "Dutch", "nds-NL": "Dutch Low Saxon"}}
        )

    languages = asyncio.run(_client(handler).search_languages("dutch"))

    assert [(language.code, language.label) for language in languages] == [
        ("nl", "Dutch"),
        ("nds-nl", "Dutch Low Saxon"),
    ]


def test_entity_labels_are_fetched_in_chunks() -> None:
    requested: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        ids = request.url.params["ids"].split("|")
        requested.append(len(ids))
        return httpx.Response(
            200,
            json={
                "entities": {
                    entity_id: {
                        "id": entity_id,
                        "labels": {"en": {"language": "en", "value": f"label {entity_id}"}},
                    }
                    for entity_id in ids[:-1]
                }
            },
        )

    ids = [f"Q{index}" for index in range(1, 61)]

    labels = asyncio.run(_client(handler).fetch_entity_labels(ids))

    assert requested == [50, 10]
    assert labels["Q1"] == "label Q1"
    assert labels["Q50"] == "Q50"
    assert len(labels) == 60


def test_constraint_lookup_failure_names_the_property() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
        return httpx.Response(502)

    with pytest.raises(PropertyLookupError) as excinfo:
        asyncio.run(_client(handler).get_property_constraints("P214"))

    assert excinfo.value.property_id == "P214"
