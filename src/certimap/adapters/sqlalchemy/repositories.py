"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select, update

from certimap.adapters.sqlalchemy.mappings import (
    SINGLETON_ID,
    changelog_table,
    changelog_to_row,
    duplicate_report_table,
    duplicate_report_to_row,
    establishment_table,
    establishment_to_row,
    refresh_meta_table,
    refresh_meta_to_row,
    row_to_changelog,
    row_to_duplicate_report,
    row_to_establishment,
    row_to_refresh_meta,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.orm import Session

    from certimap.domain.model import (
        ChangelogRecord,
        ChangelogStatus,
        DuplicateReport,
        Establishment,
        RefreshMeta,
    )

log = logging.getLogger(__name__)


class SqlAlchemyEstablishmentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_all(self) -> list[Establishment]:
        stmt = select(establishment_table).order_by(establishment_table.c.id)
        rows = self.session.execute(stmt).mappings()
        return [row_to_establishment(row) for row in rows]

    def save_many(self, entities: Iterable[Establishment]) -> int:
        """Upsert ``entities`` by id; within one call the last entity for an id wins."""

        rows: dict[str, dict[str, object]] = {}
        for entity in entities:
            if not entity.id:
                log.warning(f"Not storing establishment without id: {entity.name!r}")
                continue
            rows[entity.id] = establishment_to_row(entity)
        if not rows:
            return 0

        self.session.execute(
            delete(establishment_table).where(establishment_table.c.id.in_(list(rows)))
        )
        self.session.execute(insert(establishment_table), list(rows.values()))
        return len(rows)


class SqlAlchemyChangelogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_ordered(self) -> list[ChangelogRecord]:
        stmt = select(changelog_table).order_by(changelog_table.c.date, changelog_table.c.id)
        return [row_to_changelog(row) for row in self.session.execute(stmt).mappings()]

    def latest(self, limit: int) -> list[ChangelogRecord]:
        stmt = (
            select(changelog_table)
            .order_by(changelog_table.c.date.desc(), changelog_table.c.id.desc())
            .limit(limit)
        )
        return [row_to_changelog(row) for row in self.session.execute(stmt).mappings()]

    def add(self, record: ChangelogRecord) -> int:
        result = self.session.execute(insert(changelog_table).values(changelog_to_row(record)))
        record_id = result.inserted_primary_key[0] if result.inserted_primary_key else None
        if not isinstance(record_id, int):
            raise RuntimeError("Changelog insert did not return an id")
        record.id = record_id
        return record_id

    def update_status(self, record_id: int, status: ChangelogStatus) -> None:
        stmt = (
            update(changelog_table)
            .where(changelog_table.c.id == record_id)
            .values(status=status.value)
        )
        result = self.session.execute(stmt)
        if result.rowcount == 0:
            raise LookupError(f"Unknown changelog record {record_id}")


class SqlAlchemyDuplicateReportRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def save_latest(self, report: DuplicateReport) -> None:
        self.session.execute(delete(duplicate_report_table))
        self.session.execute(insert(duplicate_report_table).values(duplicate_report_to_row(report)))

    def latest(self) -> DuplicateReport | None:
        stmt = select(duplicate_report_table).where(duplicate_report_table.c.id == SINGLETON_ID)
        row = self.session.execute(stmt).mappings().one_or_none()
        return row_to_duplicate_report(row) if row is not None else None


class SqlAlchemyRefreshMetaRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self) -> RefreshMeta | None:
        stmt = select(refresh_meta_table).where(refresh_meta_table.c.id == SINGLETON_ID)
        row = self.session.execute(stmt).mappings().one_or_none()
        return row_to_refresh_meta(row) if row is not None else None

    def save(self, meta: RefreshMeta) -> None:
        self.session.execute(delete(refresh_meta_table))
        self.session.execute(insert(refresh_meta_table).values(refresh_meta_to_row(meta)))


if TYPE_CHECKING:
    from certimap.domain.ports import (
        ChangelogRepository,
        DuplicateReportRepository,
        EstablishmentRepository,
        RefreshMetaRepository,
    )

    def _check_repositories(session: Session) -> None:
        _establishments: EstablishmentRepository = SqlAlchemyEstablishmentRepository(session)
        _changelog: ChangelogRepository = SqlAlchemyChangelogRepository(session)
        _duplicates: DuplicateReportRepository = SqlAlchemyDuplicateReportRepository(session)
        _meta: RefreshMetaRepository = SqlAlchemyRefreshMetaRepository(session)
