"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from certimap.adapters.achahada import AchahadaFetcher
from certimap.adapters.avs import AvsFetcher
from certimap.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from certimap.config import get_refresh_config
from certimap.domain.categories import matches_category_filter
from certimap.domain.model import CategoryFilter
from certimap.domain.ports import RefreshUnitOfWork
from certimap.domain.refresh import refresh_if_stale

if TYPE_CHECKING:
    from collections.abc import Sequence

    from certimap.domain.model import ChangelogRecord, DuplicateReport, Establishment
    from certimap.domain.ports import EstablishmentFetcher
    from certimap.domain.refresh import RefreshResult

UnitOfWorkFactory = Callable[[], RefreshUnitOfWork]

log = getLogger(__name__)


def build_fetchers() -> tuple[EstablishmentFetcher, ...]:
    return (AchahadaFetcher(), AvsFetcher())


def _resolve_unit_of_work(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def refresh(
    *,
    force: bool = False,
    write_batch_size: int | None = None,
    fetchers: Sequence[EstablishmentFetcher] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> RefreshResult | None:
    """Refresh the establishment store from every source unless the last refresh is recent."""

    config = get_refresh_config()
    effective_fetchers = fetchers if fetchers is not None else build_fetchers()
    batch_size = write_batch_size or config.write_batch_size
    log.info(
        "Starting refresh: sources=%s, force=%s, batch_size=%s",
        [fetcher.name for fetcher in effective_fetchers],
        force,
        batch_size,
    )

    result = refresh_if_stale(
        fetchers=effective_fetchers,
        unit_of_work_factory=_resolve_unit_of_work(unit_of_work_factory),
        max_age=config.cache_max_age,
        force=force,
        write_batch_size=batch_size,
    )
    if result is not None:
        log.info(
            f"Finished refresh: total={result.total}, added={result.added}, "
            f"removed={result.removed}, modified={result.modified}, "
            f"duplicates={result.duplicates}"
        )
    return result


def list_establishments(
    *,
    category: CategoryFilter = CategoryFilter.ALL,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[Establishment]:
    """Return the establishments currently present, narrowed to a category bucket."""

    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        entities = uow.repositories.establishments.list_all()
    return [
        entity
        for entity in entities
        if not entity.is_removed and matches_category_filter(entity, category)
    ]


def recent_changelog(
    *,
    limit: int = 10,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[ChangelogRecord]:
    if limit <= 0:
        raise ValueError("limit must be positive")
    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        return uow.repositories.changelog.latest(limit)


def latest_duplicates(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> DuplicateReport | None:
    with _resolve_unit_of_work(unit_of_work_factory)() as uow:
        return uow.repositories.duplicates.latest()
