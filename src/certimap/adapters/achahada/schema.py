"""Pydantic models describing the Achahada store-locator payload."""

from __future__ import annotations

from collections.abc import Mapping

from certimap.adapters.listing import ListingPayload


class AchahadaStore(ListingPayload):
    """One entry of the ``store_search`` response (a JSON array of these)."""

    id: str | None = None
    store: str | None = None
    address: str | None = None
    zip: str | None = None
    city: str | None = None
    lat: str | None = None
    lng: str | None = None


AchahadaStoreInput = AchahadaStore | Mapping[str, object]
