"""Public interface for the Achahada adapter."""

from __future__ import annotations

from .client import AchahadaFetcher
from .schema import AchahadaStore, AchahadaStoreInput
from .translator import translate_store

__all__ = ["AchahadaFetcher", "AchahadaStore", "AchahadaStoreInput", "translate_store"]
