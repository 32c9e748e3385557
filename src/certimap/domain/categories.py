"""Category buckets used by the map UI to filter establishments."""

from __future__ import annotations

from typing import TYPE_CHECKING

from certimap.domain.model import CategoryFilter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from certimap.domain.model import Establishment


def _normalized(categories: Iterable[str]) -> list[str]:
    return [category.strip().lower() for category in categories if category and category.strip()]


def is_restaurant(categories: Iterable[str]) -> bool:
    return any(
        "restaurant" in category.lower() or "resto" in category.lower() for category in categories
    )


def is_boucherie(categories: Iterable[str]) -> bool:
    return any("boucher" in category.lower() for category in categories)


def matches_category_filter(establishment: Establishment, category_filter: CategoryFilter) -> bool:
    """Return whether ``establishment`` belongs to the requested bucket.

    An establishment without categories only matches ``OTHERS`` (and ``ALL``).
    """

    if category_filter is CategoryFilter.ALL:
        return True
    categories = _normalized(establishment.categories)
    if not categories:
        return category_filter is CategoryFilter.OTHERS

    restaurant = is_restaurant(categories)
    boucherie = is_boucherie(categories)
    if category_filter is CategoryFilter.RESTAURANTS:
        return restaurant
    if category_filter is CategoryFilter.BOUCHERIES:
        return boucherie
    return not restaurant and not boucherie
