"""Upstream source configuration: endpoints and the filter partitions to fetch."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from .env import optional_env_float, optional_env_str
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig
from .storage import get_storage_config

ACHAHADA_BASE_URL: Final[str] = "https://achahada.com/wp-admin/admin-ajax.php"
AVS_BASE_URL: Final[str] = "https://equinox.avs.fr/v1/common/partners"
SOURCE_TIMEOUT_SECONDS: Final[float] = 30.0
HTTP_CACHE_MINUTES: Final[float] = 60.0

# filter code -> category label attached to every record of that partition
ACHAHADA_FILTERS: Final[Mapping[int, str]] = MappingProxyType(
    {
        29: "Restaurant",
        30: "Boucherie",
        31: "Fournisseur",
        32: "Cash",
        34: "Distributeur",
        36: "Marque",
    }
)
AVS_PARTNER_TYPES: Final[Mapping[int, str]] = MappingProxyType(
    {
        1: "Boucherie",
        2: "Restaurant",
        3: "Fournisseur",
    }
)

_DEFAULT_HEADERS: Final[Mapping[str, str]] = MappingProxyType(
    {"Accept": "application/json", "User-Agent": "certimap/0.1"}
)


@dataclass(frozen=True, slots=True)
class SourceConfig:
    """One upstream source and the partitions it is fetched in."""

    name: str
    base_url: str
    filters: Mapping[int, str]
    resilience: ResilienceConfig


def _is_listing_payload(payload: object) -> bool:
    return isinstance(payload, list)


def _cache() -> CacheConfig | None:
    # CERTIMAP_HTTP_CACHE_MINUTES=0 turns the cache off
    minutes = optional_env_float("CERTIMAP_HTTP_CACHE_MINUTES", HTTP_CACHE_MINUTES)
    if minutes <= 0:
        return None
    return CacheConfig(
        path=get_storage_config().http_cache_file,
        ttl_seconds=minutes * 60,
        should_cache=_is_listing_payload,
    )


def _resilience(name: str, base_url: str) -> ResilienceConfig:
    return ResilienceConfig(
        name=name,
        base_url=base_url,
        timeout_seconds=optional_env_float("CERTIMAP_HTTP_TIMEOUT", SOURCE_TIMEOUT_SECONDS),
        ratelimit=RateLimit(max_calls=4, per_seconds=1.0),
        cache=_cache(),
        default_headers=_DEFAULT_HEADERS,
    )


def get_achahada_config(*, resilience: ResilienceConfig | None = None) -> SourceConfig:
    base_url = optional_env_str("ACHAHADA_BASE_URL", ACHAHADA_BASE_URL)
    return SourceConfig(
        name="achahada",
        base_url=base_url,
        filters=ACHAHADA_FILTERS,
        resilience=resilience or _resilience("achahada", base_url),
    )


def get_avs_config(*, resilience: ResilienceConfig | None = None) -> SourceConfig:
    base_url = optional_env_str("AVS_BASE_URL", AVS_BASE_URL)
    return SourceConfig(
        name="avs",
        base_url=base_url,
        filters=AVS_PARTNER_TYPES,
        resilience=resilience or _resilience("avs", base_url),
    )
