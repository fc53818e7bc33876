"""Application configuration helpers."""

from __future__ import annotations

from .env import env_bool, env_float, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .mapping import (
    DEFAULT_IGNORED_KEY_PATTERNS,
    MappingConfig,
    get_mapping_config,
    load_ignored_key_patterns,
)
from .reconciliation import (
    ReconciliationConfig,
    get_probe_resilience,
    get_reconciliation_config,
)
from .source import SourceConfig, get_source_config
from .wikidata import WikidataConfig, get_wikidata_config

__all__ = [
    "DEFAULT_IGNORED_KEY_PATTERNS",
    "CacheConfig",
    "ConfigurationError",
    "MappingConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReconciliationConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "SourceConfig",
    "WikidataConfig",
    "env_bool",
    "env_float",
    "get_mapping_config",
    "get_probe_resilience",
    "get_reconciliation_config",
    "get_source_config",
    "get_wikidata_config",
    "load_ignored_key_patterns",
    "optional_env_var",
    "require_env_vars",
]
