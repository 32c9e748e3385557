"""Identity-key deduplication of a normalized batch.

The identity key (name, city and coordinates rounded to four decimals) is deliberately
coarse so the same shop listed by both sources lands on one key. Candidates sharing a key
are only merged when ``entities_are_compatible`` agrees; otherwise the pair is reported
for manual review and the first-seen record stays canonical.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Final

from certimap.domain.model import DeduplicationResult, DuplicatePair, Establishment
from certimap.domain.normalize import establishment_from_document, normalize_shape
from certimap.domain.text import normalize_comparable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

COORDINATE_TOLERANCE: Final[float] = 1e-4
MISSING_COORDINATE_KEY: Final[str] = "undefined"

log = logging.getLogger(__name__)


def _coordinate_key(value: float | None) -> str:
    if value is None or not math.isfinite(value):
        return MISSING_COORDINATE_KEY
    return f"{value:.4f}"


def create_identity_key(entity: Establishment) -> str:
    """Derive the dedup key ``name|city|lat|lng``.

    Two establishments without coordinates and with the same name and city share a key.
    """

    return "|".join(
        (
            normalize_comparable(entity.name),
            normalize_comparable(entity.city),
            _coordinate_key(entity.lat),
            _coordinate_key(entity.lng),
        )
    )


def numbers_are_close(
    a: float | None, b: float | None, tolerance: float = COORDINATE_TOLERANCE
) -> bool:
    """Both missing counts as close; exactly one missing does not."""

    if a is None or not math.isfinite(a):
        return b is None or not math.isfinite(b)
    if b is None or not math.isfinite(b):
        return False
    return abs(a - b) <= tolerance


def _equivalent_if_either_missing(a: str | None, b: str | None) -> bool:
    return normalize_comparable(a) == normalize_comparable(b) or not a or not b


def entities_are_compatible(a: Establishment, b: Establishment) -> bool:
    """Return whether two key-sharing candidates may be merged into one record."""

    if normalize_comparable(a.source) != normalize_comparable(b.source):
        return False
    if normalize_comparable(a.name) != normalize_comparable(b.name):
        return False
    return (
        _equivalent_if_either_missing(a.city, b.city)
        and _equivalent_if_either_missing(a.address, b.address)
        and numbers_are_close(a.lat, b.lat)
        and numbers_are_close(a.lng, b.lng)
    )


def merge_into(target: Establishment, incoming: Establishment) -> None:
    """Absorb ``incoming`` into ``target`` in place.

    Filters and categories are unioned, a non-empty incoming name wins, blank
    address/city/source/coordinates are filled from ``incoming`` and ``updated_at``
    advances to the later timestamp.
    """

    other = normalize_shape(incoming)

    target.filter |= other.filter
    target.categories |= other.categories
    if other.name:
        target.name = other.name

    if not target.address and other.address:
        target.address = other.address
    if not target.city and other.city:
        target.city = other.city
    if not target.source and other.source:
        target.source = other.source
    if target.lat is None and other.lat is not None:
        target.lat = other.lat
    if target.lng is None and other.lng is not None:
        target.lng = other.lng

    # ISO-8601 strings order chronologically
    if other.updated_at and (not target.updated_at or other.updated_at > target.updated_at):
        target.updated_at = other.updated_at


def deduplicate(entities: Iterable[Establishment]) -> DeduplicationResult:
    """Collapse a normalized batch on identity key in a single pass.

    The first entity seen for a key is the accumulator and is mutated by merges; an
    incompatible candidate is recorded as a ``DuplicatePair`` of clones and dropped.
    """

    seen: dict[str, Establishment] = {}
    duplicates: list[DuplicatePair] = []
    merged = 0

    for entity in entities:
        key = create_identity_key(entity)
        existing = seen.get(key)
        if existing is None:
            seen[key] = entity
            continue
        if entities_are_compatible(existing, entity):
            merge_into(existing, entity)
            merged += 1
            continue
        log.debug("Duplicate candidates for key %s: %s vs %s", key, existing.id, entity.id)
        duplicates.append(DuplicatePair(original=existing.clone(), duplicate=entity.clone()))

    log.debug(
        "Deduplicated batch: unique=%s, merged=%s, duplicates=%s",
        len(seen),
        merged,
        len(duplicates),
    )
    return DeduplicationResult(deduplicated=list(seen.values()), duplicates=duplicates)


def duplicate_pair_from_document(document: Mapping[str, object]) -> DuplicatePair:
    """Rebuild a ``DuplicatePair`` from its stored document form."""

    return DuplicatePair(
        original=establishment_from_document(document.get("original")),
        duplicate=establishment_from_document(document.get("duplicate")),
    )

