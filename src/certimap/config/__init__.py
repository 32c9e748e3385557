"""Application configuration helpers."""

from __future__ import annotations

from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .refresh import RefreshConfig, get_refresh_config
from .sources import (
    ACHAHADA_FILTERS,
    AVS_PARTNER_TYPES,
    SourceConfig,
    get_achahada_config,
    get_avs_config,
)
from .storage import StorageConfig, get_database_uri, get_storage_config

__all__ = [
    "ACHAHADA_FILTERS",
    "AVS_PARTNER_TYPES",
    "CacheConfig",
    "ConfigurationError",
    "RateLimit",
    "RefreshConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "SourceConfig",
    "StorageConfig",
    "configure_logging",
    "get_achahada_config",
    "get_avs_config",
    "get_database_uri",
    "get_refresh_config",
    "get_storage_config",
]
