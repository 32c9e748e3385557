"""Fetcher for the Achahada store locator."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from certimap.adapters.http_resilience import ResilientClient
from certimap.adapters.listing import fetch_listing
from certimap.config import SourceConfig, get_achahada_config

from .translator import translate_store

if TYPE_CHECKING:
    from collections.abc import Callable

    from certimap.config import ResilienceConfig
    from certimap.domain.ports import EstablishmentFetcher, RawEstablishment

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class AchahadaFetcher:
    """Fetch every Achahada filter partition concurrently."""

    config: SourceConfig = field(default_factory=get_achahada_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    @property
    def name(self) -> str:
        return self.config.name

    async def fetch(self, *, updated_at: str) -> list[RawEstablishment]:
        async with self.client_factory(self.config.resilience) as client:
            partitions = await asyncio.gather(
                *(
                    self._fetch_filter(client, code=code, category=category, updated_at=updated_at)
                    for code, category in self.config.filters.items()
                )
            )
        records = [record for partition in partitions for record in partition]
        log.info(f"Achahada: {len(records)} store(s) over {len(partitions)} filter(s)")
        return records

    async def _fetch_filter(
        self,
        client: ResilientClient,
        *,
        code: int,
        category: str,
        updated_at: str,
    ) -> list[RawEstablishment]:
        stores = await fetch_listing(
            client,
            self.config.base_url,
            params={"action": "store_search", "autoload": 1, "filter": code},
            source=self.name,
        )
        return [
            translate_store(store, category=category, filter_code=code, updated_at=updated_at)
            for store in stores
        ]


if TYPE_CHECKING:
    _fetcher_check: EstablishmentFetcher = AchahadaFetcher()
