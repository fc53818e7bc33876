"""Configuration for the collection API that provides source records."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

DEFAULT_PAGE_SIZE = 50
SOURCE_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class SourceConfig:
    """Where records come from and how many to request per page."""

    api_url: str | None
    per_page: int
    resilience: ResilienceConfig


def get_source_config(*, api_url: str | None = None) -> SourceConfig:
    url = api_url or optional_env_var("LODMAPPER_SOURCE_URL")
    raw_per_page = optional_env_var("LODMAPPER_SOURCE_PAGE_SIZE")
    try:
        per_page = int(raw_per_page) if raw_per_page else DEFAULT_PAGE_SIZE
    except ValueError as exc:
        raise ConfigurationError(
            f"LODMAPPER_SOURCE_PAGE_SIZE must be an integer, got {raw_per_page!r}"
        ) from exc
    if per_page <= 0:
        raise ConfigurationError("LODMAPPER_SOURCE_PAGE_SIZE must be positive")

    return SourceConfig(
        api_url=url,
        per_page=per_page,
        resilience=ResilienceConfig(
            name="source",
            timeout_seconds=SOURCE_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            cache=CacheConfig(backend="memory"),
            default_headers={"Accept": "application/ld+json, application/json"},
        ),
    )
