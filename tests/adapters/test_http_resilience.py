from __future__ import annotations

import asyncio
from pathlib import Path  # noqa: TC003

import httpx
from hishel.httpx import AsyncCacheClient

from certimap.adapters.http_resilience import ResilientClient
from certimap.config import CacheConfig, ResilienceConfig

LISTING_URL = "https://listing.test/stores"


def _cached_config(cache_file: Path) -> ResilienceConfig:
    return ResilienceConfig(
        name="listing",
        cache=CacheConfig(
            path=cache_file,
            ttl_seconds=3600,
            should_cache=lambda payload: isinstance(payload, list),
        ),
    )


def _fetch_with_fresh_clients(
    config: ResilienceConfig, transport: httpx.MockTransport, times: int
) -> list[object]:
    async def run() -> list[object]:
        payloads: list[object] = []
        for _ in range(times):
            async with ResilientClient(config, transport=transport) as client:
                response = await client.get(LISTING_URL, params={"filter": 29})
                payloads.append(response.json())
        return payloads

    return asyncio.run(run())


def test_cache_is_shared_between_client_instances(tmp_path: Path) -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, json=[{"id": 1, "store": "Le Gourmet"}])

    cache_file = tmp_path / "cache" / "http_cache.db"
    payloads = _fetch_with_fresh_clients(
        _cached_config(cache_file), httpx.MockTransport(handler), times=2
    )

    assert payloads == [[{"id": 1, "store": "Le Gourmet"}]] * 2
    assert len(calls) == 1
    assert cache_file.exists()


def test_error_payloads_are_not_cached(tmp_path: Path) -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, json={"error": "maintenance"})

    _fetch_with_fresh_clients(
        _cached_config(tmp_path / "http_cache.db"), httpx.MockTransport(handler), times=2
    )

    assert len(calls) == 2


def test_client_without_cache_uses_plain_httpx() -> None:
    client = ResilientClient(ResilienceConfig(name="plain"))

    assert not isinstance(client._client, AsyncCacheClient)  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    asyncio.run(client.aclose())
