"""Fetcher for the AVS partner directory."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from certimap.adapters.http_resilience import ResilientClient
from certimap.adapters.listing import fetch_listing
from certimap.config import SourceConfig, get_avs_config

from .translator import translate_partner

if TYPE_CHECKING:
    from collections.abc import Callable

    from certimap.config import ResilienceConfig
    from certimap.domain.ports import EstablishmentFetcher, RawEstablishment

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class AvsFetcher:
    """Fetch every AVS partner type concurrently."""

    config: SourceConfig = field(default_factory=get_avs_config)
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
        log.info(f"AVS: {len(records)} partner(s) over {len(partitions)} type(s)")
        return records

    async def _fetch_filter(
        self,
        client: ResilientClient,
        *,
        code: int,
        category: str,
        updated_at: str,
    ) -> list[RawEstablishment]:
        partners = await fetch_listing(
            client,
            self.config.base_url,
            params={"type": code},
            source=self.name,
        )
        return [
            translate_partner(partner, category=category, filter_code=code, updated_at=updated_at)
            for partner in partners
        ]


if TYPE_CHECKING:
    _fetcher_check: EstablishmentFetcher = AvsFetcher()
