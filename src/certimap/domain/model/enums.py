"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Source(StrEnum):
    ACHAHADA = "Achahada"
    AVS = "AVS"


class ChangelogStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"


class CategoryFilter(StrEnum):
    """Category buckets offered by the map UI."""

    ALL = "all"
    RESTAURANTS = "restaurants"
    BOUCHERIES = "boucheries"
    OTHERS = "others"


class ChangeField(StrEnum):
    NAME = "name"
    ADDRESS = "address"
    CITY = "city"
    SOURCE = "source"
    LAT = "lat"
    LNG = "lng"
    CATEGORIES = "categories"
    FILTER = "filter"
