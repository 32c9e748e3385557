"""Domain model for reconciled establishments."""

from __future__ import annotations

from .changelog import (
    ChangelogRecord,
    ChangelogResult,
    ChangelogStats,
    FieldChange,
    ModificationEntry,
    RefreshMeta,
)
from .enums import CategoryFilter, ChangeField, ChangelogStatus, Source
from .establishment import (
    DOCUMENT_FIELDS,
    DeduplicationResult,
    Document,
    DuplicatePair,
    DuplicateReport,
    Establishment,
    FilterCode,
)

__all__ = [
    "DOCUMENT_FIELDS",
    "CategoryFilter",
    "ChangeField",
    "ChangelogRecord",
    "ChangelogResult",
    "ChangelogStats",
    "ChangelogStatus",
    "DeduplicationResult",
    "Document",
    "DuplicatePair",
    "DuplicateReport",
    "Establishment",
    "FieldChange",
    "FilterCode",
    "ModificationEntry",
    "RefreshMeta",
    "Source",
]
