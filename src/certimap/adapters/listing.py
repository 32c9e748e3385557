"""Shared pieces of the listing source adapters."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ConfigDict, field_validator

from certimap.domain.normalize import parse_coordinate
from certimap.domain.ports import SourceFetchError
from certimap.domain.text import format_number

if TYPE_CHECKING:
    from collections.abc import Mapping

    from certimap.adapters.http_resilience import ResilientClient
    from certimap.domain.model import Source
    from certimap.domain.ports import RawEstablishment

log = logging.getLogger(__name__)


def coerce_text(value: object) -> str | None:
    """Numbers become strings, blanks and anything non-scalar become ``None``."""

    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_number(value) if math.isfinite(value) else None
    return None


class ListingPayload(BaseModel):
    """Base for upstream listing records.

    Every field is optional text so validation cannot fail on a JSON object: a malformed
    value degrades to ``None`` instead of rejecting the record.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    _coerce_fields = field_validator("*", mode="before")(coerce_text)


def build_address(street: str | None, zip_code: str | None, city: str | None) -> str:
    return f"{street or ''}, {zip_code or ''} {city or ''}".strip()


def build_record(
    *,
    id_prefix: str,
    source_id: str | None,
    name: str | None,
    lat: str | None,
    lng: str | None,
    street: str | None,
    zip_code: str | None,
    city: str | None,
    source: Source,
    category: str | None,
    filter_code: int | float | None,
    updated_at: str,
) -> RawEstablishment:
    """Assemble a pre-canonical record with a source-prefixed identifier."""

    if source_id is None:
        log.warning("%s record without id: %r", source.value, name)
    has_filter = filter_code is not None and math.isfinite(filter_code)
    return {
        "id": f"{id_prefix}-{source_id}" if source_id is not None else None,
        "name": name.strip() if name is not None else None,
        "lat": parse_coordinate(lat),
        "lng": parse_coordinate(lng),
        "address": build_address(street, zip_code, city),
        "city": city,
        "source": source.value,
        "categories": [category] if category else [],
        "filter": [filter_code] if has_filter else [],
        "updatedAt": updated_at,
    }


async def fetch_listing(
    client: ResilientClient,
    url: str,
    *,
    params: Mapping[str, str | int],
    source: str,
) -> list[dict[str, object]]:
    """GET one listing partition and return its JSON objects.

    Transport failures, error statuses and payloads that are not a JSON array raise
    ``SourceFetchError``; array items that are not objects are skipped.
    """

    try:
        response = await client.get(url, params=httpx.QueryParams(dict(params)))
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPError as exc:
        raise SourceFetchError(f"{source} request failed: {exc}", source=source) from exc
    except ValueError as exc:
        raise SourceFetchError(f"{source} returned invalid JSON", source=source) from exc

    if not isinstance(payload, list):
        raise SourceFetchError(f"Unexpected {source} response payload", source=source)

    records: list[dict[str, object]] = []
    for item in payload:  # pyright: ignore[reportUnknownVariableType]
        if isinstance(item, dict):
            records.append(item)  # pyright: ignore[reportUnknownArgumentType]
        else:
            log.warning(f"Skipping non-object {source} record: {item!r}")
    return records
