"""Ports for persisting establishments and their sync history."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable

    from certimap.domain.model import (
        ChangelogRecord,
        ChangelogStatus,
        DuplicateReport,
        Establishment,
        RefreshMeta,
    )


@runtime_checkable
class EstablishmentRepository(Protocol):
    """Persistence contract for the current establishment snapshot."""

    def list_all(self) -> list[Establishment]: ...

    def save_many(self, entities: Iterable[Establishment]) -> int: ...


@runtime_checkable
class ChangelogRepository(Protocol):
    """Persistence contract for changelog records."""

    def list_ordered(self) -> list[ChangelogRecord]:
        """Return every record, oldest first."""
        ...

    def latest(self, limit: int) -> list[ChangelogRecord]:
        """Return up to ``limit`` records, newest first."""
        ...

    def add(self, record: ChangelogRecord) -> int: ...

    def update_status(self, record_id: int, status: ChangelogStatus) -> None: ...


@runtime_checkable
class DuplicateReportRepository(Protocol):
    def save_latest(self, report: DuplicateReport) -> None: ...

    def latest(self) -> DuplicateReport | None: ...


@runtime_checkable
class RefreshMetaRepository(Protocol):
    def get(self) -> RefreshMeta | None: ...

    def save(self, meta: RefreshMeta) -> None: ...
