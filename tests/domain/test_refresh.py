from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from certimap.domain.model import ChangelogStatus, RefreshMeta
from certimap.domain.ports import (
    DuplicateReportRepository,
    RefreshMetaRepository,
    SourceFetchError,
)
from certimap.domain.refresh import is_stale, refresh_establishments, refresh_if_stale
from tests.helpers.establishments import (
    FakeChangelogRepository,
    FakeDuplicateReportRepository,
    FakeEstablishmentRepository,
    FakeFetcher,
    FakeRefreshMetaRepository,
    FakeUnitOfWork,
    make_raw_record,
    make_repositories,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from certimap.domain.ports import RefreshRepositories

T1 = "2024-01-01T00:00:00.000Z"
T2 = "2024-01-02T00:00:00.000Z"
T3 = "2024-01-03T00:00:00.000Z"
T4 = "2024-01-04T00:00:00.000Z"


def _factory(repositories: RefreshRepositories) -> Callable[[], FakeUnitOfWork]:
    return lambda: FakeUnitOfWork(repositories)


def _establishments(repositories: RefreshRepositories) -> FakeEstablishmentRepository:
    assert isinstance(repositories.establishments, FakeEstablishmentRepository)
    return repositories.establishments


def _changelog(repositories: RefreshRepositories) -> FakeChangelogRepository:
    assert isinstance(repositories.changelog, FakeChangelogRepository)
    return repositories.changelog


def _sources() -> tuple[FakeFetcher, FakeFetcher]:
    achahada = FakeFetcher(
        records=[
            make_raw_record("ach-1", name="Le Gourmet", categories=["Restaurant"], filter=[29]),
            make_raw_record("ach-2", name="Boucherie Salam", lat=45.75, lng=4.85, city="Lyon"),
        ],
        fetcher_name="achahada",
    )
    avs = FakeFetcher(
        records=[make_raw_record("avs-7", name="Chez Ali", source="AVS", lat=43.3, lng=5.4)],
        fetcher_name="avs",
    )
    return achahada, avs


def test_first_refresh_adds_everything_and_completes_changelog() -> None:
    repositories = make_repositories()
    achahada, avs = _sources()

    result = refresh_establishments(
        fetchers=[achahada, avs], unit_of_work_factory=_factory(repositories), timestamp=T1
    )

    assert (result.total, result.added, result.removed, result.modified) == (3, 3, 0, 0)
    assert achahada.calls == [T1]
    assert avs.calls == [T1]
    stored = _establishments(repositories).stored
    assert set(stored) == {"ach-1", "ach-2", "avs-7"}
    assert all(entity.created_at == T1 and entity.updated_at == T1 for entity in stored.values())

    records = _changelog(repositories).records
    assert len(records) == 1
    assert records[0].status is ChangelogStatus.COMPLETED
    assert records[0].stats.total == 3
    assert result.changelog_id == records[0].id

    assert repositories.refresh_meta.get() == RefreshMeta(
        date=T1, count=3, added=3, removed=0, modified=0
    )
    report = repositories.duplicates.latest()
    assert report is not None
    assert report.date == T1
    assert report.count == 0


def test_removal_is_persisted_once_as_tombstone() -> None:
    repositories = make_repositories()
    achahada, avs = _sources()
    factory = _factory(repositories)
    refresh_establishments(fetchers=[achahada, avs], unit_of_work_factory=factory, timestamp=T1)

    avs.records = []
    second = refresh_establishments(
        fetchers=[achahada, avs], unit_of_work_factory=factory, timestamp=T2
    )
    third = refresh_establishments(
        fetchers=[achahada, avs], unit_of_work_factory=factory, timestamp=T3
    )

    assert second.removed == 1
    assert third.removed == 0
    tombstone = _establishments(repositories).stored["avs-7"]
    assert tombstone.removed_at == T2
    assert tombstone.created_at == T1
    assert [record.stats.removed for record in _changelog(repositories).records] == [0, 1, 0]


def test_establishment_returning_after_removal_can_be_removed_again() -> None:
    repositories = make_repositories()
    factory = _factory(repositories)
    record = make_raw_record("ach-1", name="Le Gourmet")
    source = FakeFetcher(records=[record], fetcher_name="achahada")

    counts: list[tuple[int, int]] = []
    for timestamp, present in ((T1, True), (T2, False), (T3, True), (T4, False)):
        source.records = [record] if present else []
        result = refresh_establishments(
            fetchers=[source], unit_of_work_factory=factory, timestamp=timestamp
        )
        counts.append((result.added, result.removed))

    assert counts == [(1, 0), (0, 1), (1, 0), (0, 1)]
    stored = _establishments(repositories).stored["ach-1"]
    assert stored.removed_at == T4
    assert stored.created_at == T1
    assert [entry.stats.added for entry in _changelog(repositories).records] == [1, 0, 1, 0]


def test_modification_is_reported_and_created_at_kept() -> None:
    repositories = make_repositories()
    achahada, avs = _sources()
    factory = _factory(repositories)
    refresh_establishments(fetchers=[achahada, avs], unit_of_work_factory=factory, timestamp=T1)

    achahada.records[0]["name"] = "Le Gourmet Paris"
    result = refresh_establishments(
        fetchers=[achahada, avs], unit_of_work_factory=factory, timestamp=T2
    )

    assert (result.added, result.modified, result.removed) == (0, 1, 0)
    stored = _establishments(repositories).stored["ach-1"]
    assert stored.name == "Le Gourmet Paris"
    assert stored.created_at == T1
    assert stored.updated_at == T2


def test_duplicates_across_sources_are_reported() -> None:
    repositories = make_repositories()
    achahada = FakeFetcher(records=[make_raw_record("ach-1")])
    avs = FakeFetcher(records=[make_raw_record("avs-1", source="AVS")])

    result = refresh_establishments(
        fetchers=[achahada, avs], unit_of_work_factory=_factory(repositories), timestamp=T1
    )

    assert result.total == 1
    assert result.duplicates == 1
    report = repositories.duplicates.latest()
    assert report is not None
    assert report.duplicates[0].duplicate.id == "avs-1"


def test_writes_are_chunked() -> None:
    repositories = make_repositories()
    fetcher = FakeFetcher(
        records=[make_raw_record(f"ach-{index}", name=f"Store {index}") for index in range(5)]
    )

    refresh_establishments(
        fetchers=[fetcher],
        unit_of_work_factory=_factory(repositories),
        timestamp=T1,
        write_batch_size=2,
    )

    assert _establishments(repositories).save_calls == [2, 2, 1]


def test_fetch_failure_aborts_before_any_write() -> None:
    repositories = make_repositories()
    broken = FakeFetcher(error=SourceFetchError("boom", source="avs"))

    with pytest.raises(SourceFetchError):
        refresh_establishments(
            fetchers=[FakeFetcher(records=[make_raw_record()]), broken],
            unit_of_work_factory=_factory(repositories),
            timestamp=T1,
        )

    assert _changelog(repositories).records == []
    assert _establishments(repositories).stored == {}


class _FailingEstablishmentRepository(FakeEstablishmentRepository):
    def save_many(self, entities: object) -> int:
        raise RuntimeError("disk full")


def test_crashed_write_leaves_pending_changelog() -> None:
    changelog = FakeChangelogRepository()
    repositories = make_repositories()
    repositories.establishments = _FailingEstablishmentRepository()
    repositories.changelog = changelog

    with pytest.raises(RuntimeError, match="disk full"):
        refresh_establishments(
            fetchers=[FakeFetcher(records=[make_raw_record()])],
            unit_of_work_factory=_factory(repositories),
            timestamp=T1,
        )

    assert [record.status for record in changelog.records] == [ChangelogStatus.PENDING]


def test_invalid_batch_size_is_rejected() -> None:
    with pytest.raises(ValueError, match="write_batch_size"):
        refresh_establishments(
            fetchers=[], unit_of_work_factory=_factory(make_repositories()), write_batch_size=0
        )


def test_is_stale() -> None:
    now = datetime(2024, 1, 2, 12, tzinfo=UTC)
    meta = RefreshMeta(date=T2, count=0, added=0, removed=0, modified=0)

    assert is_stale(None, max_age=timedelta(hours=24), now=now)
    assert not is_stale(meta, max_age=timedelta(hours=24), now=now)
    assert is_stale(meta, max_age=timedelta(hours=6), now=now)
    unreadable = RefreshMeta(date="yesterday", count=0, added=0, removed=0, modified=0)
    assert is_stale(unreadable, max_age=timedelta(hours=24), now=now)


def test_refresh_if_stale_skips_recent_refresh() -> None:
    meta = RefreshMeta(date=T2, count=1, added=1, removed=0, modified=0)
    repositories = make_repositories(meta=meta)
    fetcher = FakeFetcher(records=[make_raw_record()])

    result = refresh_if_stale(
        fetchers=[fetcher],
        unit_of_work_factory=_factory(repositories),
        now=datetime(2024, 1, 2, 6, tzinfo=UTC),
    )

    assert result is None
    assert fetcher.calls == []


def test_refresh_if_stale_runs_when_forced_or_stale() -> None:
    meta = RefreshMeta(date=T2, count=1, added=1, removed=0, modified=0)
    repositories = make_repositories(meta=meta)
    fetcher = FakeFetcher(records=[make_raw_record()])
    factory = _factory(repositories)

    forced = refresh_if_stale(
        fetchers=[fetcher],
        unit_of_work_factory=factory,
        force=True,
        now=datetime(2024, 1, 2, 6, tzinfo=UTC),
    )
    stale = refresh_if_stale(
        fetchers=[fetcher],
        unit_of_work_factory=factory,
        now=datetime(2024, 1, 5, tzinfo=UTC),
    )

    assert forced is not None
    assert forced.sync_timestamp == "2024-01-02T06:00:00.000Z"
    assert stale is not None
    assert stale.sync_timestamp == "2024-01-05T00:00:00.000Z"
    assert fetcher.calls == [forced.sync_timestamp, stale.sync_timestamp]


def test_fake_repositories_match_ports() -> None:
    assert isinstance(FakeDuplicateReportRepository(), DuplicateReportRepository)
    assert isinstance(FakeRefreshMetaRepository(), RefreshMetaRepository)
