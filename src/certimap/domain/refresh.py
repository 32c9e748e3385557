"""Application service running one refresh cycle end to end.

fetch every source (fan-out, then fan-in) -> normalize -> deduplicate -> diff against the
stored snapshot -> drop already recorded removals -> persist behind a pending changelog
record that is only marked completed once every write went through.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from certimap.domain.changelog import compute_changelog
from certimap.domain.deduplicate import deduplicate
from certimap.domain.model import (
    ChangelogRecord,
    ChangelogStats,
    ChangelogStatus,
    DuplicateReport,
    RefreshMeta,
)
from certimap.domain.normalize import normalize_shape
from certimap.domain.timestamps import parse_timestamp, sync_timestamp, utc_now
from certimap.domain.tombstones import filter_tombstoned_removals

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import datetime

    from certimap.domain.model import DeduplicationResult, Establishment
    from certimap.domain.ports import EstablishmentFetcher, RawEstablishment, RefreshUnitOfWork

DEFAULT_WRITE_BATCH_SIZE = 500
DEFAULT_CACHE_MAX_AGE = timedelta(hours=24)

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RefreshResult:
    """Outcome of a refresh cycle."""

    sync_timestamp: str
    total: int
    added: int
    removed: int
    modified: int
    duplicates: int
    changelog_id: int | None = None


async def fetch_all_sources(
    fetchers: Iterable[EstablishmentFetcher],
    *,
    updated_at: str,
) -> list[RawEstablishment]:
    """Fetch every source concurrently and return all records once all have arrived."""

    batches = await asyncio.gather(*(fetcher.fetch(updated_at=updated_at) for fetcher in fetchers))
    return [record for batch in batches for record in batch]


def reconcile(raw_records: Iterable[RawEstablishment]) -> DeduplicationResult:
    """Normalize every raw record and deduplicate the complete batch."""

    result = deduplicate(normalize_shape(record) for record in raw_records)
    log.info(f"{len(result.deduplicated)} unique establishment(s)")
    if result.duplicates:
        log.warning(f"{len(result.duplicates)} duplicate pair(s) flagged for review")
    return result


def _chunks(entities: Sequence[Establishment], size: int) -> Iterable[Sequence[Establishment]]:
    for start in range(0, len(entities), size):
        yield entities[start : start + size]


def refresh_establishments(
    *,
    fetchers: Iterable[EstablishmentFetcher],
    unit_of_work_factory: Callable[[], RefreshUnitOfWork],
    timestamp: str | None = None,
    write_batch_size: int = DEFAULT_WRITE_BATCH_SIZE,
) -> RefreshResult:
    """Run a full refresh cycle and return its summary."""

    if write_batch_size <= 0:
        raise ValueError("write_batch_size must be positive")

    cycle_timestamp = timestamp or sync_timestamp()
    raw_records = asyncio.run(fetch_all_sources(fetchers, updated_at=cycle_timestamp))
    log.info(f"Fetched {len(raw_records)} raw record(s)")

    reconciled = reconcile(raw_records)
    current = reconciled.deduplicated

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        previous = repositories.establishments.list_all()
        history = repositories.changelog.list_ordered()

        changelog = compute_changelog(current, previous, cycle_timestamp)
        removed = filter_tombstoned_removals(changelog.removed, history)
        stats = ChangelogStats(
            added=len(changelog.added),
            removed=len(removed),
            modified=len(changelog.modified),
            total=len(current),
        )
        log.info(
            f"{stats.added} addition(s), {stats.removed} removal(s), "
            f"{stats.modified} modification(s)"
        )
        if len(changelog.removed) > len(removed):
            log.info(f"{len(changelog.removed) - len(removed)} removal(s) already recorded")

        changelog_id = repositories.changelog.add(
            ChangelogRecord(
                date=cycle_timestamp,
                status=ChangelogStatus.PENDING,
                added=changelog.added,
                removed=removed,
                modified=changelog.modified,
                stats=stats,
            )
        )
        uow.commit()

        for chunk in _chunks(current, write_batch_size):
            repositories.establishments.save_many(chunk)
            uow.commit()
        for chunk in _chunks(removed, write_batch_size):
            repositories.establishments.save_many(chunk)
            uow.commit()

        repositories.duplicates.save_latest(
            DuplicateReport(date=cycle_timestamp, duplicates=tuple(reconciled.duplicates))
        )
        repositories.refresh_meta.save(
            RefreshMeta(
                date=cycle_timestamp,
                count=stats.total,
                added=stats.added,
                removed=stats.removed,
                modified=stats.modified,
            )
        )
        repositories.changelog.update_status(changelog_id, ChangelogStatus.COMPLETED)
        uow.commit()

    log.info(f"Refresh {cycle_timestamp} completed: {stats.total} establishment(s) stored")
    return RefreshResult(
        sync_timestamp=cycle_timestamp,
        total=stats.total,
        added=stats.added,
        removed=stats.removed,
        modified=stats.modified,
        duplicates=len(reconciled.duplicates),
        changelog_id=changelog_id,
    )


def is_stale(meta: RefreshMeta | None, *, max_age: timedelta, now: datetime) -> bool:
    """A store that was never refreshed, or whose last refresh is unreadable, is stale."""

    if meta is None:
        return True
    try:
        refreshed_at = parse_timestamp(meta.date)
    except ValueError:
        log.warning(f"Ignoring unreadable refresh date {meta.date!r}")
        return True
    return now - refreshed_at >= max_age


def refresh_if_stale(
    *,
    fetchers: Iterable[EstablishmentFetcher],
    unit_of_work_factory: Callable[[], RefreshUnitOfWork],
    max_age: timedelta = DEFAULT_CACHE_MAX_AGE,
    force: bool = False,
    now: datetime | None = None,
    write_batch_size: int = DEFAULT_WRITE_BATCH_SIZE,
) -> RefreshResult | None:
    """Refresh unless the last refresh is younger than ``max_age``; ``None`` when skipped."""

    current_time = now or utc_now()
    if not force:
        with unit_of_work_factory() as uow:
            meta = uow.repositories.refresh_meta.get()
        if not is_stale(meta, max_age=max_age, now=current_time):
            log.info(f"Cache still valid (last refresh {meta.date if meta else None}), skipping")
            return None

    return refresh_establishments(
        fetchers=fetchers,
        unit_of_work_factory=unit_of_work_factory,
        timestamp=sync_timestamp(current_time),
        write_batch_size=write_batch_size,
    )
