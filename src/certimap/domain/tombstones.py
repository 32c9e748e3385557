"""Suppression of removals that an earlier completed cycle already recorded."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from certimap.domain.model import ChangelogRecord, Establishment

log = logging.getLogger(__name__)


def tombstoned_ids(history: Iterable[ChangelogRecord]) -> set[str]:
    """Replay completed cycles in date order and return the ids currently removed.

    Pending cycles may have crashed half-way through their writes, so they never
    contribute to the baseline.
    """

    removed_ids: set[str] = set()
    for record in sorted(history, key=lambda record: record.date):
        if not record.is_completed:
            continue
        for entry in record.added:
            if entry.id:
                removed_ids.discard(entry.id)
        for entry in record.removed:
            if entry.id:
                removed_ids.add(entry.id)
    return removed_ids


def filter_tombstoned_removals(
    removed: Iterable[Establishment],
    history: Iterable[ChangelogRecord],
) -> list[Establishment]:
    """Drop removals already recorded by the history, and repeats within ``removed``."""

    baseline = tombstoned_ids(history)
    reported: set[str] = set()
    kept: list[Establishment] = []
    suppressed = 0

    for entry in removed:
        if entry.id is None or entry.id in baseline or entry.id in reported:
            suppressed += 1
            continue
        reported.add(entry.id)
        kept.append(entry)

    if suppressed:
        log.debug("Suppressed %s already recorded removal(s)", suppressed)
    return kept
