"""SQLAlchemy adapter package for certimap."""

from __future__ import annotations

from .mappings import metadata
from .repositories import (
    SqlAlchemyChangelogRepository,
    SqlAlchemyDuplicateReportRepository,
    SqlAlchemyEstablishmentRepository,
    SqlAlchemyRefreshMetaRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyChangelogRepository",
    "SqlAlchemyDuplicateReportRepository",
    "SqlAlchemyEstablishmentRepository",
    "SqlAlchemyRefreshMetaRepository",
    "SqlAlchemyUnitOfWork",
    "metadata",
    "shutdown",
    "startup",
]
