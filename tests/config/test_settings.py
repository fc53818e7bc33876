from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003

import pytest

from lodmapper.common import storage
from lodmapper.config import (
    DEFAULT_IGNORED_KEY_PATTERNS,
    ConfigurationError,
    MissingConfigurationError,
    get_mapping_config,
    get_reconciliation_config,
    get_source_config,
    get_wikidata_config,
    optional_env_var,
    require_env_vars,
)
from lodmapper.config.wikidata import DEFAULT_RECONCILE_URL


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)
    monkeypatch.setenv("BLANK_VAR", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR", "BLANK_VAR"])

    assert "BLANK_VAR, MISSING_VAR" in str(exc.value)


def test_optional_env_var_strips_and_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  nl ")

    assert optional_env_var("EXAMPLE_VAR") == "nl"
    assert optional_env_var("UNSET_EXAMPLE_VAR", "en") == "en"


def test_mapping_config_defaults_without_file() -> None:
    config = get_mapping_config()

    assert config.ignored_key_patterns == DEFAULT_IGNORED_KEY_PATTERNS
    assert config.from_defaults


def test_mapping_config_reads_ignore_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "ignore.json"
    path.write_text(json.dumps({"ignoredKeyPatterns": ["o:", "@context", " "]}), encoding="utf-8")
    monkeypatch.setenv("LODMAPPER_IGNORE_KEYS", str(path))

    config = get_mapping_config()

    assert config.ignored_key_patterns == ("o:", "@context")
    assert config.source == path
    assert not config.from_defaults


@pytest.mark.parametrize("content", ["{broken", '{"patterns": []}'])
def test_mapping_config_falls_back_on_bad_file(tmp_path: Path, content: str) -> None:
    path = tmp_path / "ignore.json"
    path.write_text(content, encoding="utf-8")

    config = get_mapping_config(ignore_file=path)

    assert config.ignored_key_patterns == DEFAULT_IGNORED_KEY_PATTERNS
    assert config.from_defaults


def test_reconciliation_config_reads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LODMAPPER_SEARCH_DEBOUNCE", "0.5")
    monkeypatch.setenv("LODMAPPER_BLOCK_MANDATORY_FORMAT", "yes")

    config = get_reconciliation_config()

    assert config.debounce_seconds == 0.5
    assert config.block_on_mandatory_format
    assert not config.probe_urls
    assert config.debounce_for("ab") == config.short_query_debounce_seconds
    assert config.debounce_for("abc") == 0.5


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("LODMAPPER_SEARCH_DEBOUNCE", "soon"),
        ("LODMAPPER_SEARCH_DEBOUNCE", "-1"),
        ("LODMAPPER_PROBE_URLS", "maybe"),
    ],
)
def test_reconciliation_config_rejects_bad_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        get_reconciliation_config()


def test_source_config_validates_page_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LODMAPPER_SOURCE_URL", "https://collection.example.org/api/items")
    monkeypatch.setenv("LODMAPPER_SOURCE_PAGE_SIZE", "25")

    config = get_source_config()

    assert (config.api_url, config.per_page) == ("https://collection.example.org/api/items", 25)
    assert get_source_config(api_url="https://other.example.org").api_url == (
        "https://other.example.org"
    )
    monkeypatch.setenv("LODMAPPER_SOURCE_PAGE_SIZE", "0")
    with pytest.raises(ConfigurationError):
        get_source_config()


def test_wikidata_config_defaults_and_user_agent(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LODMAPPER_CONTACT", "curator@example.org")

    config = get_wikidata_config()

    assert config.reconcile_url == DEFAULT_RECONCILE_URL
    assert config.language == "en"
    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["User-Agent"].endswith("(curator@example.org)")


def test_data_dir_prefers_explicit_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("LODMAPPER_DATA_DIR", str(custom))

    assert storage.get_data_dir() == custom.resolve()


def test_http_cache_path_creates_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("LODMAPPER_HTTP_CACHE", raising=False)
    monkeypatch.setenv("LODMAPPER_DATA_DIR", str(tmp_path / "data-dir"))

    path = storage.get_http_cache_path()

    assert path == (tmp_path / "data-dir" / storage.HTTP_CACHE_FILENAME).resolve()
    assert path.parent.exists()
