"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import EstablishmentFetcher, RawEstablishment, SourceFetchError
from .persistence import (
    ChangelogRepository,
    DuplicateReportRepository,
    EstablishmentRepository,
    RefreshMetaRepository,
)
from .unit_of_work import (
    RefreshRepositories,
    RefreshUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ChangelogRepository",
    "DuplicateReportRepository",
    "EstablishmentFetcher",
    "EstablishmentRepository",
    "RawEstablishment",
    "RefreshMetaRepository",
    "RefreshRepositories",
    "RefreshUnitOfWork",
    "RepositoryCollection",
    "SourceFetchError",
    "UnitOfWork",
]
