"""Refresh cycle defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from .env import optional_env_float, optional_env_int

DEFAULT_WRITE_BATCH_SIZE = 500
DEFAULT_CACHE_HOURS = 24.0


@dataclass(frozen=True, slots=True)
class RefreshConfig:
    write_batch_size: int = DEFAULT_WRITE_BATCH_SIZE
    cache_max_age: timedelta = field(default_factory=lambda: timedelta(hours=DEFAULT_CACHE_HOURS))


def get_refresh_config() -> RefreshConfig:
    cache_hours = optional_env_float("CERTIMAP_CACHE_HOURS", DEFAULT_CACHE_HOURS)
    return RefreshConfig(
        write_batch_size=optional_env_int("CERTIMAP_WRITE_BATCH_SIZE", DEFAULT_WRITE_BATCH_SIZE),
        cache_max_age=timedelta(hours=cache_hours),
    )
