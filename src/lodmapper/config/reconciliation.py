"""Reconciliation defaults: search debounce and validation strictness."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_float
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_DEBOUNCE_SECONDS = 0.3
SHORT_QUERY_DEBOUNCE_SECONDS = 0.6
SHORT_QUERY_LENGTH = 3
DEFAULT_SEARCH_LIMIT = 10
PROBE_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    short_query_debounce_seconds: float = SHORT_QUERY_DEBOUNCE_SECONDS
    short_query_length: int = SHORT_QUERY_LENGTH
    search_limit: int = DEFAULT_SEARCH_LIMIT
    # When set, a violated mandatory format constraint blocks confirmation.
    block_on_mandatory_format: bool = False
    probe_urls: bool = False

    def debounce_for(self, query: str) -> float:
        if len(query.strip()) < self.short_query_length:
            return self.short_query_debounce_seconds
        return self.debounce_seconds


def get_reconciliation_config() -> ReconciliationConfig:
    return ReconciliationConfig(
        debounce_seconds=env_float("LODMAPPER_SEARCH_DEBOUNCE", DEFAULT_DEBOUNCE_SECONDS),
        block_on_mandatory_format=env_bool("LODMAPPER_BLOCK_MANDATORY_FORMAT", default=False),
        probe_urls=env_bool("LODMAPPER_PROBE_URLS", default=False),
    )


def get_probe_resilience() -> ResilienceConfig:
    """Client settings for URL reachability checks; never cached."""

    return ResilienceConfig(
        name="url-probe",
        timeout_seconds=PROBE_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=1),
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        cache=None,
    )
