"""Wikidata API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from lodmapper import __version__

from .env import optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_WIKIDATA_API_URL = "https://www.wikidata.org/w/api.php"
DEFAULT_RECONCILE_URL = "https://wikidata.reconci.link/en/api"
FALLBACK_RECONCILE_URL = "https://tools.wmflabs.org/openrefine-wikidata/en/api"
DEFAULT_LANGUAGE = "en"
# property metadata changes rarely; one hour matches the in-session cache lifetime
PROPERTY_CACHE_TTL_SECONDS = 3600.0


@dataclass(frozen=True, slots=True)
class WikidataConfig:
    api_url: str
    reconcile_url: str
    reconcile_fallback_url: str | None
    language: str
    resilience: ResilienceConfig


def _user_agent() -> str:
    contact = optional_env_var("LODMAPPER_CONTACT")
    base = f"lodmapper/{__version__}"
    return f"{base} ({contact})" if contact else base


def get_wikidata_config(*, resilience: ResilienceConfig | None = None) -> WikidataConfig:
    api_url = optional_env_var("LODMAPPER_WIKIDATA_API_URL") or DEFAULT_WIKIDATA_API_URL
    reconcile_url = optional_env_var("LODMAPPER_RECONCILE_URL") or DEFAULT_RECONCILE_URL
    language = optional_env_var("LODMAPPER_LANGUAGE") or DEFAULT_LANGUAGE

    return WikidataConfig(
        api_url=api_url,
        reconcile_url=reconcile_url,
        reconcile_fallback_url=FALLBACK_RECONCILE_URL,
        language=language,
        resilience=resilience
        or ResilienceConfig(
            name="wikidata",
            timeout_seconds=20.0,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            retry=RetryPolicy(total=3),
            cache=CacheConfig(backend="memory", default_ttl_seconds=PROPERTY_CACHE_TTL_SECONDS),
            default_headers={"User-Agent": _user_agent(), "Accept": "application/json"},
        ),
    )
