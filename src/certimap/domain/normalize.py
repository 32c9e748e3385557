"""Coercion of heterogeneous records into the canonical establishment shape.

Every function here is total: malformed values degrade to ``None`` or an empty set and
no record is ever rejected.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING

from certimap.domain.model import DOCUMENT_FIELDS, Establishment
from certimap.domain.text import sanitize_text

if TYPE_CHECKING:
    from certimap.domain.model import FilterCode

type RawRecord = Mapping[str, object]


def parse_coordinate(value: object) -> float | None:
    """Parse a coordinate from a number or numeric string; ``None`` when not finite.

    A missing coordinate never defaults to ``0`` so it stays distinguishable from ``0,0``.
    """

    candidate: float
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        try:
            candidate = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            candidate = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return candidate if math.isfinite(candidate) else None


def _to_number(value: object) -> FilterCode | None:
    parsed = parse_coordinate(value) if not isinstance(value, int) else value
    if parsed is None or isinstance(parsed, bool):
        return None
    if isinstance(parsed, float) and parsed.is_integer():
        return int(parsed)
    return parsed


def to_filter_codes(value: object) -> set[FilterCode]:
    """Accept a list, a single number or a numeric string."""

    if isinstance(value, list | tuple | set | frozenset):
        items: list[object] = list(value)  # pyright: ignore[reportUnknownArgumentType]
    elif isinstance(value, str) and not value.strip():
        return set()
    else:
        items = [value]
    codes: set[FilterCode] = set()
    for item in items:
        number = _to_number(item)
        if number is not None:
            codes.add(number)
    return codes


def to_categories(value: object) -> set[str]:
    """Accept a list of labels or a single label; blanks are dropped."""

    if isinstance(value, str):
        stripped = value.strip()
        return {stripped} if stripped else set()
    if not isinstance(value, list | tuple | set | frozenset):
        return set()
    categories: set[str] = set()
    for item in value:  # pyright: ignore[reportUnknownVariableType]
        if item is None:
            continue
        text = str(item).strip()  # pyright: ignore[reportUnknownArgumentType]
        if text:
            categories.add(text)
    return categories


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _sanitized_or_raw(value: object) -> str | None:
    # unsanitizable originals are kept, as text, rather than discarded
    sanitized = sanitize_text(value)
    if sanitized is not None:
        return sanitized
    if value is None or isinstance(value, str):
        return value
    return str(value)


def normalize_shape(raw: RawRecord | Establishment) -> Establishment:
    """Return a new canonical ``Establishment`` built from ``raw``.

    ``raw`` is a storage document or a pre-canonical adapter record (camelCase timestamp
    keys). The input is never mutated; keys outside the canonical shape land in ``extra``.
    """

    record: RawRecord = raw.to_document() if isinstance(raw, Establishment) else raw
    raw_id = record.get("id")

    return Establishment(
        id=None if raw_id is None else str(raw_id),
        name=_sanitized_or_raw(record.get("name")),
        address=_sanitized_or_raw(record.get("address")),
        city=_sanitized_or_raw(record.get("city")),
        source=_sanitized_or_raw(record.get("source")),
        lat=parse_coordinate(record.get("lat")),
        lng=parse_coordinate(record.get("lng")),
        categories=to_categories(record.get("categories")),
        filter=to_filter_codes(record.get("filter")),
        created_at=_optional_str(record.get("createdAt")),
        updated_at=_optional_str(record.get("updatedAt")),
        removed_at=_optional_str(record.get("removedAt")),
        extra={key: value for key, value in record.items() if key not in DOCUMENT_FIELDS},
    )


def establishment_from_document(value: object) -> Establishment:
    """Normalize a nested stored document; anything that is not a mapping yields a blank record."""

    if isinstance(value, Mapping):
        return normalize_shape(value)  # pyright: ignore[reportUnknownArgumentType]
    return Establishment()
