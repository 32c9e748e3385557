from __future__ import annotations

from datetime import timedelta
from pathlib import Path  # noqa: TC003

import pytest

from certimap.config import (
    ACHAHADA_FILTERS,
    ConfigurationError,
    get_achahada_config,
    get_avs_config,
    get_refresh_config,
)
from certimap.config.env import optional_env_float, optional_env_int, optional_env_str


def test_optional_env_str_falls_back_on_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    assert optional_env_str("EXAMPLE_VAR", "fallback") == "fallback"


def test_optional_env_float_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_FLOAT", "soon")

    with pytest.raises(ConfigurationError) as exc:
        optional_env_float("EXAMPLE_FLOAT", 1.0)

    assert "EXAMPLE_FLOAT" in str(exc.value)


@pytest.mark.parametrize("value", ["abc", "0", "-5"])
def test_optional_env_int_requires_positive_integer(
    monkeypatch: pytest.MonkeyPatch, value: str
) -> None:
    monkeypatch.setenv("EXAMPLE_INT", value)

    with pytest.raises(ConfigurationError):
        optional_env_int("EXAMPLE_INT", 10)


def test_refresh_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CERTIMAP_WRITE_BATCH_SIZE", raising=False)
    monkeypatch.delenv("CERTIMAP_CACHE_HOURS", raising=False)

    config = get_refresh_config()

    assert config.write_batch_size == 500
    assert config.cache_max_age == timedelta(hours=24)


def test_refresh_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CERTIMAP_WRITE_BATCH_SIZE", "50")
    monkeypatch.setenv("CERTIMAP_CACHE_HOURS", "1.5")

    config = get_refresh_config()

    assert config.write_batch_size == 50
    assert config.cache_max_age == timedelta(minutes=90)


def test_source_configs(monkeypatch: pytest.MonkeyPatch, isolated_data_dir: Path) -> None:
    monkeypatch.delenv("ACHAHADA_BASE_URL", raising=False)
    monkeypatch.delenv("CERTIMAP_HTTP_CACHE_MINUTES", raising=False)
    monkeypatch.setenv("CERTIMAP_HTTP_TIMEOUT", "5")

    achahada = get_achahada_config()
    avs = get_avs_config()

    assert achahada.base_url == "https://achahada.com/wp-admin/admin-ajax.php"
    assert achahada.filters is ACHAHADA_FILTERS
    assert achahada.resilience.timeout_seconds == 5.0
    assert dict(avs.filters) == {1: "Boucherie", 2: "Restaurant", 3: "Fournisseur"}
    assert avs.resilience.name == "avs"
    assert avs.resilience.cache is not None
    assert avs.resilience.cache.should_cache is not None
    assert avs.resilience.cache.should_cache([])
    assert not avs.resilience.cache.should_cache({"error": "nope"})
    assert avs.resilience.cache.path == isolated_data_dir.resolve() / "http_cache.db"
    assert avs.resilience.cache.ttl_seconds == 3600


def test_http_cache_ttl_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CERTIMAP_HTTP_CACHE_MINUTES", "15")
    cache = get_achahada_config().resilience.cache
    assert cache is not None
    assert cache.ttl_seconds == 900

    monkeypatch.setenv("CERTIMAP_HTTP_CACHE_MINUTES", "0")
    assert get_achahada_config().resilience.cache is None
