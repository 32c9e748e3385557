"""Ports for fetching establishment listings from upstream sources."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

type RawEstablishment = dict[str, object]


class SourceFetchError(RuntimeError):
    """Raised when an upstream source cannot deliver its listings."""

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


@runtime_checkable
class EstablishmentFetcher(Protocol):
    """Async port returning every pre-canonical record of one upstream source.

    Implementations fan out over their own filter partitions and raise on any failed
    request; partial results are never returned.
    """

    @property
    def name(self) -> str: ...

    async def fetch(self, *, updated_at: str) -> list[RawEstablishment]: ...


__all__ = ["EstablishmentFetcher", "RawEstablishment", "SourceFetchError"]
