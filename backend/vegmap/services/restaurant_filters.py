"""
Homepage filter/search/sort pipeline.

Pure functions over an in-memory restaurant collection. Works on ORM
``Restaurant`` objects and on plain dicts alike.
"""
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Sequence

from vegmap.models.restaurant import PRICE_RANGES

PRICE_ORDER = {"budget": 1, "mid-range": 2, "upscale": 3}
SORT_KEYS = ("name", "category", "price")
SEARCH_FIELDS = ("name_en", "name_ko", "address_en", "address_ko")


def _get(restaurant: Any, name: str, default: Any = None) -> Any:
    if isinstance(restaurant, dict):
        return restaurant.get(name, default)
    return getattr(restaurant, name, default)


@dataclass
class FilterOptions:
    categories: List[str] = field(default_factory=list)
    price_ranges: List[str] = field(default_factory=list)
    side_dish_only: bool = False
    verified: bool = False
    sort_by: str = "name"


def filter_by_category(restaurants: Iterable[Any], categories: Sequence[str]) -> List[Any]:
    if not categories:
        return list(restaurants)
    return [r for r in restaurants if _get(r, "category") in categories]


def filter_by_price(restaurants: Iterable[Any], price_ranges: Sequence[str]) -> List[Any]:
    # selecting every price range is the same as selecting none
    if not price_ranges or set(PRICE_RANGES) <= set(price_ranges):
        return list(restaurants)
    return [r for r in restaurants if _get(r, "price_range") and _get(r, "price_range") in price_ranges]


def filter_by_features(restaurants: Iterable[Any], side_dish_only: bool, verified: bool) -> List[Any]:
    result = list(restaurants)
    if side_dish_only:
        result = [r for r in result if _get(r, "offers_side_dish_only")]
    if verified:
        result = [r for r in result if _get(r, "is_verified")]
    return result


def filter_by_text(restaurants: Iterable[Any], search: str) -> List[Any]:
    # blank means no search; otherwise the query is matched as typed
    if not (search or "").strip():
        return list(restaurants)
    query = search.lower()
    return [
        r for r in restaurants
        if any(query in (_get(r, name) or "").lower() for name in SEARCH_FIELDS)
    ]


def sort_restaurants(restaurants: Iterable[Any], sort_by: str = "name", language: str = "en") -> List[Any]:
    if sort_by == "name":
        name_field = "name_ko" if language == "ko" else "name_en"
        return sorted(restaurants, key=lambda r: (_get(r, name_field) or "").casefold())
    if sort_by == "category":
        return sorted(restaurants, key=lambda r: _get(r, "category") or "")
    if sort_by == "price":
        return sorted(restaurants, key=lambda r: PRICE_ORDER.get(_get(r, "price_range"), 0))
    return list(restaurants)


def apply_filters(
    restaurants: Sequence[Any],
    filters: FilterOptions,
    search: str = "",
    language: str = "en",
) -> List[Any]:
    """Category, price, feature and text filters, then sort"""
    result = filter_by_category(restaurants, filters.categories)
    result = filter_by_price(result, filters.price_ranges)
    result = filter_by_features(result, filters.side_dish_only, filters.verified)
    result = filter_by_text(result, search)
    return sort_restaurants(result, filters.sort_by, language)
