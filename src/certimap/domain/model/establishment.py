"""Canonical establishment record and the values derived from it."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Final

type FilterCode = int | float
type Document = dict[str, object]

# Storage document keys owned by the canonical shape; everything else is carried in ``extra``.
DOCUMENT_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "id",
        "name",
        "address",
        "city",
        "source",
        "lat",
        "lng",
        "categories",
        "filter",
        "createdAt",
        "updatedAt",
        "removedAt",
    }
)


@dataclass(eq=False, kw_only=True)
class Establishment:
    """A certified establishment as reconciled across sources.

    ``categories`` and ``filter`` behave as sets; they are materialized as sorted lists only
    when converted to a storage document. ``extra`` keeps input fields the canonical shape
    does not know about so upstream metadata survives a round trip.
    """

    id: str | None = None
    name: str | None = None
    address: str | None = None
    city: str | None = None
    source: str | None = None
    lat: float | None = None
    lng: float | None = None
    categories: set[str] = field(default_factory=set)
    filter: set[FilterCode] = field(default_factory=set)
    created_at: str | None = None
    updated_at: str | None = None
    removed_at: str | None = None
    extra: Document = field(default_factory=dict)

    @property
    def is_removed(self) -> bool:
        return self.removed_at is not None

    def clone(self) -> Establishment:
        return copy.deepcopy(self)

    def to_document(self) -> Document:
        document: Document = copy.deepcopy(self.extra)
        document.update(
            {
                "id": self.id,
                "name": self.name,
                "address": self.address,
                "city": self.city,
                "source": self.source,
                "lat": self.lat,
                "lng": self.lng,
                "categories": sorted(self.categories),
                "filter": sorted(self.filter),
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
                "removedAt": self.removed_at,
            }
        )
        return document


@dataclass(frozen=True, slots=True)
class DuplicatePair:
    """Two candidates sharing an identity key that were not safe to merge."""

    original: Establishment
    duplicate: Establishment

    def to_document(self) -> Document:
        return {
            "original": self.original.to_document(),
            "duplicate": self.duplicate.to_document(),
        }


@dataclass(slots=True)
class DeduplicationResult:
    deduplicated: list[Establishment]
    duplicates: list[DuplicatePair]


@dataclass(frozen=True, slots=True)
class DuplicateReport:
    """Latest duplicate pairs kept for operator review."""

    date: str
    duplicates: tuple[DuplicatePair, ...] = ()

    @property
    def count(self) -> int:
        return len(self.duplicates)
