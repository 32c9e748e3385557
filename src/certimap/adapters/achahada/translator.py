"""Translate Achahada store payloads into pre-canonical establishment records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from certimap.adapters.listing import build_record
from certimap.domain.model import Source

from .schema import AchahadaStore, AchahadaStoreInput

if TYPE_CHECKING:
    from certimap.domain.ports import RawEstablishment

ID_PREFIX = "ach"


def _ensure_store(store: AchahadaStoreInput) -> AchahadaStore:
    if isinstance(store, AchahadaStore):
        return store
    return AchahadaStore.model_validate(store)


def translate_store(
    store: AchahadaStoreInput,
    *,
    category: str | None,
    filter_code: int | None,
    updated_at: str,
) -> RawEstablishment:
    """Map a store onto ``ach-<id>``; the street, zip and city form the address."""

    payload = _ensure_store(store)
    return build_record(
        id_prefix=ID_PREFIX,
        source_id=payload.id,
        name=payload.store,
        lat=payload.lat,
        lng=payload.lng,
        street=payload.address,
        zip_code=payload.zip,
        city=payload.city,
        source=Source.ACHAHADA,
        category=category,
        filter_code=filter_code,
        updated_at=updated_at,
    )
