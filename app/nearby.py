# nearby.py
# Point query over the category store: per-category radius filter, distance sort, cap.

import logging
from typing import Dict, Iterable, List, Mapping, Union

from category_store import Category
from geo_math import distance_miles
from models import CategoryResult, NearbyItem, NearbyResponse
from settings import RESULT_CAP

logger = logging.getLogger(__name__)


def nearby_items(category: Category, lat: float, lng: float, cap: int = RESULT_CAP) -> List[NearbyItem]:
    scored = [
        NearbyItem(**item.model_dump(), distance=distance_miles(lat, lng, item.lat, item.lng))
        for item in category.items
    ]
    within = [it for it in scored if it.distance <= category.radius_miles]
    # sorted() is stable: equal distances keep load order
    within = sorted(within, key=lambda it: it.distance)
    return within[: max(cap, 0)]


def _within(categories: List[Category]) -> str:
    radii = sorted({c.radius_miles for c in categories})
    if not radii:
        return "near"
    if len(radii) == 1:
        return f"within {radii[0]:g} miles of"
    return f"within {radii[0]:g}-{radii[-1]:g} miles of"


def query_nearby(
    categories: Union[Mapping[str, Category], Iterable[Category]],
    lat: float,
    lng: float,
    cap: int = RESULT_CAP,
) -> NearbyResponse:
    """
    Rank each category's items around (lat, lng).
    total is the sum of the capped lists, i.e. what is actually returned.
    """
    if isinstance(categories, Mapping):
        categories = categories.values()
    categories = list(categories)

    results: Dict[str, CategoryResult] = {}
    total = 0
    for category in categories:
        items = nearby_items(category, lat, lng, cap)
        total += len(items)
        results[category.key] = CategoryResult(
            label=category.label,
            color=category.color,
            source_label=category.source_label,
            radius_miles=category.radius_miles,
            match_count=len(items),
            items=items,
        )

    summary = f"Found {total} places/projects {_within(categories)} ({lat:.5f}, {lng:.5f})."
    logger.debug("[nearby] lat=%.5f lng=%.5f total=%d", lat, lng, total)
    return NearbyResponse(lat=lat, lng=lng, total=total, summary=summary, categories=results)
