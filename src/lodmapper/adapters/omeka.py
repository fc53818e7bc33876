"""Source records from an Omeka S style JSON-LD API, or from a local export."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from lodmapper.adapters.http_resilience import ResilientClient, decode_json
from lodmapper.config.source import SourceConfig, get_source_config
from lodmapper.domain.analysis import context_prefixes
from lodmapper.domain.model import normalize_records

if TYPE_CHECKING:
    from lodmapper.adapters.http_resilience import ClientFactory
    from lodmapper.domain.model import JsonObject

log = getLogger(__name__)

TOTAL_RESULTS_HEADER = "Omeka-S-Total-Results"


class SourceAPIError(RuntimeError):
    """Raised when the collection API or a local export cannot be read."""


@dataclass(slots=True)
class SourceFetcher:
    """Fetch every record behind an items URL, page by page."""

    config: SourceConfig = field(default_factory=get_source_config)
    client_factory: ClientFactory = field(default=ResilientClient)

    def __call__(self, url: str | None = None, *, max_items: int | None = None) -> list[JsonObject]:
        return asyncio.run(self.fetch(url, max_items=max_items))

    async def fetch(
        self, url: str | None = None, *, max_items: int | None = None
    ) -> list[JsonObject]:
        target = url or self.config.api_url
        if not target:
            raise SourceAPIError("No source URL given and LODMAPPER_SOURCE_URL is not set")

        records: list[JsonObject] = []
        page = 1
        async with self.client_factory(self.config.resilience) as client:
            while True:
                payload, response = await self._request_page(client, target, page)
                batch = normalize_records(payload)
                records.extend(batch)
                if max_items is not None and len(records) >= max_items:
                    records = records[:max_items]
                    break
                total = _total_results(response)
                if total is not None and len(records) >= total:
                    break
                # a single record or a short page ends the listing
                if not isinstance(payload, list) or len(batch) < self.config.per_page:
                    break
                page += 1

        log.info("Fetched %d records from %s (%d page(s))", len(records), target, page)
        return records

    async def _request_page(
        self, client: ResilientClient, url: str, page: int
    ) -> tuple[object, httpx.Response]:
        params = {"page": str(page), "per_page": str(self.config.per_page)}
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SourceAPIError(f"Fetching {url} (page {page}) failed: {exc}") from exc
        try:
            payload = decode_json(response, source=url)
        except ValueError as exc:
            raise SourceAPIError(str(exc)) from exc
        if not isinstance(payload, (list, dict)):
            raise SourceAPIError(f"Unexpected payload from {url}")
        return payload, response


def _total_results(response: httpx.Response) -> int | None:
    raw = response.headers.get(TOTAL_RESULTS_HEADER)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def fetch_records(
    url: str | None = None,
    *,
    per_page: int | None = None,
    max_items: int | None = None,
    client_factory: ClientFactory | None = None,
) -> list[JsonObject]:
    config = get_source_config(api_url=url)
    if per_page is not None:
        if per_page <= 0:
            raise ValueError("per_page must be positive")
        config = SourceConfig(
            api_url=config.api_url, per_page=per_page, resilience=config.resilience
        )
    fetcher = SourceFetcher(config=config, client_factory=client_factory or ResilientClient)
    return fetcher(max_items=max_items)


async def fetch_context_async(
    url: str,
    *,
    config: SourceConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> dict[str, str]:
    """Resolve a remote JSON-LD context into ``prefix -> namespace`` pairs."""

    resolved = config or get_source_config()
    factory = client_factory or ResilientClient
    async with factory(resolved.resilience) as client:
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SourceAPIError(f"Fetching context {url} failed: {exc}") from exc
    try:
        payload = decode_json(response, source=url)
    except ValueError as exc:
        raise SourceAPIError(str(exc)) from exc
    prefixes = context_prefixes(payload)
    log.debug("Context %s defines %d prefixes", url, len(prefixes))
    return prefixes


def fetch_context(
    url: str,
    *,
    config: SourceConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> dict[str, str]:
    return asyncio.run(fetch_context_async(url, config=config, client_factory=client_factory))


def remote_context_url(records: list[JsonObject]) -> str | None:
    """The ``@context`` URL of the first record, when it is a plain URL."""

    if not records:
        return None
    context = records[0].get("@context")
    if isinstance(context, str) and context.startswith(("http://", "https://")):
        return context
    return None


def load_records_file(path: str | Path) -> list[JsonObject]:
    """Read a JSON export: a list of records, an ``items`` wrapper or one record."""

    file_path = Path(path)
    try:
        payload = json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SourceAPIError(f"Cannot read {file_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SourceAPIError(f"{file_path} is not valid JSON: {exc}") from exc
    records = normalize_records(payload)
    if not records:
        raise SourceAPIError(f"{file_path} contains no records")
    return records

