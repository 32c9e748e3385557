"""SQLAlchemy table metadata and row conversions for establishments and their history."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Column,
    Dialect,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
)

from certimap.domain.changelog import modification_from_document
from certimap.domain.deduplicate import duplicate_pair_from_document
from certimap.domain.model import (
    ChangelogRecord,
    ChangelogStats,
    ChangelogStatus,
    DuplicateReport,
    RefreshMeta,
)
from certimap.domain.normalize import establishment_from_document, normalize_shape

if TYPE_CHECKING:
    from collections.abc import Mapping

    from certimap.domain.model import Document, Establishment

# single-row tables (latest duplicate report, refresh bookkeeping) use this key
SINGLETON_ID = 1


class JsonText(TypeDecorator[object]):
    """JSON document stored as text; non-ASCII kept readable."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: object, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False)

    def process_result_value(self, value: str | None, dialect: Dialect) -> object:
        _ = dialect
        if value is None:
            return None
        return json.loads(value)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

establishment_table = Table(
    "establishment",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=True),
    Column("address", String, nullable=True),
    Column("city", String, nullable=True),
    Column("source", String, nullable=True),
    Column("lat", Float, nullable=True),
    Column("lng", Float, nullable=True),
    Column("categories", JsonText, nullable=False),
    Column("filter", JsonText, nullable=False),
    Column("created_at", String, nullable=True),
    Column("updated_at", String, nullable=True),
    Column("removed_at", String, nullable=True, index=True),
    Column("extra", JsonText, nullable=True),
)

changelog_table = Table(
    "changelog",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("date", String, nullable=False, index=True),
    Column("status", String(16), nullable=False),
    Column("added", JsonText, nullable=False),
    Column("removed", JsonText, nullable=False),
    Column("modified", JsonText, nullable=False),
    Column("stats", JsonText, nullable=False),
)

duplicate_report_table = Table(
    "duplicate_report",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("date", String, nullable=False),
    Column("count", Integer, nullable=False),
    Column("duplicates", JsonText, nullable=False),
)

refresh_meta_table = Table(
    "refresh_meta",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("date", String, nullable=False),
    Column("count", Integer, nullable=False),
    Column("added", Integer, nullable=False),
    Column("removed", Integer, nullable=False),
    Column("modified", Integer, nullable=False),
)


def _document_list(value: object) -> list[Mapping[str, object]]:
    if not isinstance(value, list):
        return []
    items = cast(list[Any], value)
    return [item for item in items if isinstance(item, dict)]


# Establishments --------------------------------------------------------------


def establishment_to_row(entity: Establishment) -> dict[str, object]:
    document = entity.to_document()
    return {
        "id": entity.id,
        "name": entity.name,
        "address": entity.address,
        "city": entity.city,
        "source": entity.source,
        "lat": entity.lat,
        "lng": entity.lng,
        "categories": document["categories"],
        "filter": document["filter"],
        "created_at": entity.created_at,
        "updated_at": entity.updated_at,
        "removed_at": entity.removed_at,
        "extra": entity.extra or None,
    }


def row_to_establishment(row: Mapping[str, Any]) -> Establishment:
    extra = row.get("extra")
    document: Document = dict(cast(dict[str, object], extra)) if isinstance(extra, dict) else {}
    document.update(
        {
            "id": row["id"],
            "name": row["name"],
            "address": row["address"],
            "city": row["city"],
            "source": row["source"],
            "lat": row["lat"],
            "lng": row["lng"],
            "categories": row["categories"],
            "filter": row["filter"],
            "createdAt": row["created_at"],
            "updatedAt": row["updated_at"],
            "removedAt": row["removed_at"],
        }
    )
    return normalize_shape(document)


# Changelog -------------------------------------------------------------------


def changelog_to_row(record: ChangelogRecord) -> dict[str, object]:
    return {
        "date": record.date,
        "status": record.status.value,
        "added": [entry.to_document() for entry in record.added],
        "removed": [entry.to_document() for entry in record.removed],
        "modified": [entry.to_document() for entry in record.modified],
        "stats": record.stats.to_document(),
    }


def _stats_from_document(value: object) -> ChangelogStats:
    if not isinstance(value, dict):
        return ChangelogStats()
    stats = cast(dict[str, object], value)

    def count(key: str) -> int:
        raw = stats.get(key)
        return raw if isinstance(raw, int) else 0

    return ChangelogStats(
        added=count("added"),
        removed=count("removed"),
        modified=count("modified"),
        total=count("total"),
    )


def row_to_changelog(row: Mapping[str, Any]) -> ChangelogRecord:
    return ChangelogRecord(
        id=row["id"],
        date=row["date"],
        status=ChangelogStatus(row["status"]),
        added=[establishment_from_document(item) for item in _document_list(row["added"])],
        removed=[establishment_from_document(item) for item in _document_list(row["removed"])],
        modified=[modification_from_document(item) for item in _document_list(row["modified"])],
        stats=_stats_from_document(row["stats"]),
    )


# Duplicate report and refresh bookkeeping -------------------------------------


def duplicate_report_to_row(report: DuplicateReport) -> dict[str, object]:
    return {
        "id": SINGLETON_ID,
        "date": report.date,
        "count": report.count,
        "duplicates": [pair.to_document() for pair in report.duplicates],
    }


def row_to_duplicate_report(row: Mapping[str, Any]) -> DuplicateReport:
    return DuplicateReport(
        date=row["date"],
        duplicates=tuple(
            duplicate_pair_from_document(item) for item in _document_list(row["duplicates"])
        ),
    )


def refresh_meta_to_row(meta: RefreshMeta) -> dict[str, object]:
    return {
        "id": SINGLETON_ID,
        "date": meta.date,
        "count": meta.count,
        "added": meta.added,
        "removed": meta.removed,
        "modified": meta.modified,
    }


def row_to_refresh_meta(row: Mapping[str, Any]) -> RefreshMeta:
    return RefreshMeta(
        date=row["date"],
        count=row["count"],
        added=row["added"],
        removed=row["removed"],
        modified=row["modified"],
    )
