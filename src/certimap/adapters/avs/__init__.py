"""Public interface for the AVS adapter."""

from __future__ import annotations

from .client import AvsFetcher
from .schema import AvsPartner, AvsPartnerInput
from .translator import translate_partner

__all__ = ["AvsFetcher", "AvsPartner", "AvsPartnerInput", "translate_partner"]
