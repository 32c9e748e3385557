"""Pydantic models describing the AVS partner directory payload."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import Field

from certimap.adapters.listing import ListingPayload


class AvsPartner(ListingPayload):
    id: str | None = None
    name: str | None = None
    address: str | None = None
    zip_code: str | None = Field(default=None, alias="zipCode")
    city: str | None = None
    latitude: str | None = None
    longitude: str | None = None


AvsPartnerInput = AvsPartner | Mapping[str, object]
