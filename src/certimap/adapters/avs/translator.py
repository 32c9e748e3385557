"""Translate AVS partner payloads into pre-canonical establishment records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from certimap.adapters.listing import build_record
from certimap.domain.model import Source

from .schema import AvsPartner, AvsPartnerInput

if TYPE_CHECKING:
    from certimap.domain.ports import RawEstablishment

ID_PREFIX = "avs"


def _ensure_partner(partner: AvsPartnerInput) -> AvsPartner:
    if isinstance(partner, AvsPartner):
        return partner
    return AvsPartner.model_validate(partner)


def translate_partner(
    partner: AvsPartnerInput,
    *,
    category: str | None,
    filter_code: int | None,
    updated_at: str,
) -> RawEstablishment:
    payload = _ensure_partner(partner)
    return build_record(
        id_prefix=ID_PREFIX,
        source_id=payload.id,
        name=payload.name,
        lat=payload.latitude,
        lng=payload.longitude,
        street=payload.address,
        zip_code=payload.zip_code,
        city=payload.city,
        source=Source.AVS,
        category=category,
        filter_code=filter_code,
        updated_at=updated_at,
    )
