"""URL reachability checks over the resilient client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from lodmapper.config.reconciliation import get_probe_resilience

from .http_resilience import ResilientClient

if TYPE_CHECKING:
    from lodmapper.config.http_resilience import ResilienceConfig

    from .http_resilience import ClientFactory

log = getLogger(__name__)

# Servers that refuse HEAD get a second chance with GET
_HEAD_REFUSED = frozenset({403, 405, 501})


class HttpUrlProbe:
    def __init__(
        self,
        *,
        resilience: ResilienceConfig | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._resilience = resilience or get_probe_resilience()
        self._client_factory = client_factory or ResilientClient

    async def is_reachable(self, url: str) -> bool:
        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.head(url)
                if response.status_code in _HEAD_REFUSED:
                    response = await client.get(url)
            except httpx.HTTPError as exc:
                log.debug("Probe of %s failed: %s", url, exc)
                return False
        return response.status_code < httpx.codes.BAD_REQUEST
