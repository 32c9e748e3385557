"""Changelog values: field changes, modification entries and persisted cycle records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import ChangelogStatus

if TYPE_CHECKING:
    from .establishment import Document, Establishment


@dataclass(frozen=True, slots=True)
class FieldChange:
    field: str
    before: object
    after: object

    def to_document(self) -> Document:
        return {"field": self.field, "before": self.before, "after": self.after}


@dataclass(frozen=True, slots=True)
class ModificationEntry:
    """Snapshot of an establishment before and after a sync, with the fields that differ."""

    id: str | None
    before: Establishment
    after: Establishment
    changes: tuple[FieldChange, ...]

    def to_document(self) -> Document:
        return {
            "id": self.id,
            "before": self.before.to_document(),
            "after": self.after.to_document(),
            "changes": [change.to_document() for change in self.changes],
        }


@dataclass(slots=True)
class ChangelogResult:
    """Partitions of one diff between the fresh set and the previous snapshot.

    ``unchanged`` holds the (stamped) current entities that matched a previous entry
    without any tracked difference.
    """

    added: list[Establishment] = field(default_factory=list)
    removed: list[Establishment] = field(default_factory=list)
    modified: list[ModificationEntry] = field(default_factory=list)
    unchanged: list[Establishment] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ChangelogStats:
    added: int = 0
    removed: int = 0
    modified: int = 0
    total: int = 0

    def to_document(self) -> Document:
        return {
            "added": self.added,
            "removed": self.removed,
            "modified": self.modified,
            "total": self.total,
        }


@dataclass(slots=True, kw_only=True)
class ChangelogRecord:
    """One sync cycle as persisted.

    Only ``COMPLETED`` records are authoritative; a ``PENDING`` record is what a cycle that
    crashed before finishing its writes leaves behind.
    """

    date: str
    status: ChangelogStatus = ChangelogStatus.PENDING
    added: list[Establishment] = field(default_factory=list)
    removed: list[Establishment] = field(default_factory=list)
    modified: list[ModificationEntry] = field(default_factory=list)
    stats: ChangelogStats = field(default_factory=ChangelogStats)
    id: int | None = None

    @property
    def is_completed(self) -> bool:
        return self.status is ChangelogStatus.COMPLETED


@dataclass(frozen=True, slots=True)
class RefreshMeta:
    """Bookkeeping of the last successful refresh, used by the cache guard."""

    date: str
    count: int
    added: int
    removed: int
    modified: int
