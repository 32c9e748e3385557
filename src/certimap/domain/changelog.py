"""Changelog computation between a fresh deduplicated set and the previous snapshot."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from certimap.domain.deduplicate import numbers_are_close
from certimap.domain.model import (
    ChangeField,
    ChangelogResult,
    Establishment,
    FieldChange,
    ModificationEntry,
)
from certimap.domain.normalize import establishment_from_document, normalize_shape

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from certimap.domain.model import Document

log = logging.getLogger(__name__)

_TEXT_FIELDS: tuple[ChangeField, ...] = (
    ChangeField.NAME,
    ChangeField.ADDRESS,
    ChangeField.CITY,
    ChangeField.SOURCE,
)


def collect_changes(previous: Establishment, current: Establishment) -> tuple[FieldChange, ...]:
    """Return the tracked fields that differ between two snapshots of one establishment.

    Coordinates tolerate floating point noise; categories and filters compare as sets.
    """

    before = normalize_shape(previous)
    after = normalize_shape(current)
    changes: list[FieldChange] = []

    for field in _TEXT_FIELDS:
        old_value = getattr(before, field.value)
        new_value = getattr(after, field.value)
        if old_value != new_value:
            changes.append(FieldChange(field=field.value, before=old_value, after=new_value))

    if not numbers_are_close(before.lat, after.lat):
        changes.append(FieldChange(field=ChangeField.LAT.value, before=before.lat, after=after.lat))
    if not numbers_are_close(before.lng, after.lng):
        changes.append(FieldChange(field=ChangeField.LNG.value, before=before.lng, after=after.lng))

    if before.categories != after.categories:
        changes.append(
            FieldChange(
                field=ChangeField.CATEGORIES.value,
                before=sorted(before.categories),
                after=sorted(after.categories),
            )
        )
    if before.filter != after.filter:
        changes.append(
            FieldChange(
                field=ChangeField.FILTER.value,
                before=sorted(before.filter),
                after=sorted(after.filter),
            )
        )
    return tuple(changes)


def _stamp(entity: Establishment, earlier: Establishment | None, sync_timestamp: str) -> None:
    entity.updated_at = sync_timestamp
    entity.removed_at = None
    if earlier is not None and earlier.created_at:
        entity.created_at = earlier.created_at
    elif not entity.created_at:
        entity.created_at = sync_timestamp


def compute_changelog(
    current: Iterable[Establishment],
    previous: Sequence[Establishment],
    sync_timestamp: str,
) -> ChangelogResult:
    """Partition ``current`` against ``previous`` into added/removed/modified entries.

    The entities of ``current`` are stamped in place (``updated_at``, ``removed_at`` and a
    first-write ``created_at``) so the caller can persist them as they are. ``previous`` is
    never mutated: removed entries are clones carrying the removal stamps. An entity whose
    previous entry is a tombstone counts as added again but keeps its original ``created_at``.
    """

    previous_by_id: Mapping[str, Establishment] = {
        entry.id: entry for entry in previous if entry.id
    }
    result = ChangelogResult()
    seen_ids: set[str] = set()

    for entity in current:
        earlier = previous_by_id.get(entity.id) if entity.id else None
        _stamp(entity, earlier, sync_timestamp)
        if entity.id:
            seen_ids.add(entity.id)

        if earlier is None or earlier.is_removed:
            result.added.append(entity.clone())
            continue

        changes = collect_changes(earlier, entity)
        if not changes:
            result.unchanged.append(entity)
            continue
        result.modified.append(
            ModificationEntry(
                id=entity.id,
                before=earlier.clone(),
                after=entity.clone(),
                changes=changes,
            )
        )

    for entry in previous:
        if not entry.id or entry.id in seen_ids:
            continue
        removed = entry.clone()
        removed.removed_at = sync_timestamp
        removed.updated_at = sync_timestamp
        result.removed.append(removed)

    log.debug(
        "Changelog at %s: added=%s, removed=%s, modified=%s, unchanged=%s",
        sync_timestamp,
        len(result.added),
        len(result.removed),
        len(result.modified),
        len(result.unchanged),
    )
    return result


def modification_from_document(document: Mapping[str, object]) -> ModificationEntry:
    """Rebuild a ``ModificationEntry`` from its stored document form."""

    raw_changes = document.get("changes")
    changes: list[FieldChange] = []
    if isinstance(raw_changes, list):
        for raw_change in raw_changes:  # pyright: ignore[reportUnknownVariableType]
            if not isinstance(raw_change, dict):
                continue
            change: Document = raw_change  # pyright: ignore[reportUnknownVariableType]
            changes.append(
                FieldChange(
                    field=str(change.get("field")),
                    before=change.get("before"),
                    after=change.get("after"),
                )
            )
    raw_id = document.get("id")
    return ModificationEntry(
        id=None if raw_id is None else str(raw_id),
        before=establishment_from_document(document.get("before")),
        after=establishment_from_document(document.get("after")),
        changes=tuple(changes),
    )

