from typing import Dict, Any, Optional, List, Sequence, Union
import math
import logging

from vegmap.services.record_store import (
    RecordStore,
    VisitRecord,
    RestaurantViewRecord,
    SearchQueryRecord,
    RestaurantRecord,
)

logger = logging.getLogger(__name__)

RECENT_LIMIT = 10


def round_half_up(value: float, digits: int = 0) -> Union[int, float]:
    """Round halves up (2.5 -> 3) instead of to even"""
    factor = 10 ** digits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if digits == 0 else rounded


def average_duration(visits: Sequence[VisitRecord]) -> float:
    """Mean duration over visits that have one; 0 when there are none"""
    durations = [v.duration_seconds for v in visits if v.duration_seconds is not None]
    if not durations:
        return 0
    return sum(durations) / len(durations)


def count_categories(
    views: Sequence[RestaurantViewRecord],
    restaurants_by_id: Dict[str, RestaurantRecord],
) -> List[Dict[str, Any]]:
    """Views per restaurant category, in first-seen order; unknown restaurants are skipped"""
    counts: Dict[str, int] = {}
    for view in views:
        restaurant = restaurants_by_id.get(view.restaurant_id)
        if restaurant is None:
            continue
        counts[restaurant.category] = counts.get(restaurant.category, 0) + 1
    return [{"category": category, "count": count} for category, count in counts.items()]


def restaurant_name(restaurants_by_id: Dict[str, RestaurantRecord], restaurant_id: str) -> str:
    restaurant = restaurants_by_id.get(restaurant_id)
    return restaurant.display_name if restaurant else "Unknown"


def build_user_progress(
    visits: Sequence[VisitRecord],
    views: Sequence[RestaurantViewRecord],
    searches: Sequence[SearchQueryRecord],
    restaurants: Sequence[RestaurantRecord],
) -> Dict[str, Any]:
    """Progress summary for one user from that user's rows"""
    restaurants_by_id = {r.id: r for r in restaurants}

    recent_searches = sorted(searches, key=lambda s: s.searched_at, reverse=True)[:RECENT_LIMIT]
    recent_views = sorted(views, key=lambda v: v.viewed_at, reverse=True)[:RECENT_LIMIT]

    return {
        "total_visits": len(visits),
        "total_restaurants_viewed": len(views),
        "total_searches": len(searches),
        "average_session_duration": round_half_up(average_duration(visits)),
        "favorite_categories": count_categories(views, restaurants_by_id),
        "recent_searches": [s.to_dict() for s in recent_searches],
        "recent_restaurant_views": [
            {
                "restaurant_id": v.restaurant_id,
                "restaurant_name": restaurant_name(restaurants_by_id, v.restaurant_id),
                "viewed_at": v.viewed_at.isoformat(),
            }
            for v in recent_views
        ],
    }


class ProgressService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def get_user_progress(self, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
        """Progress for a signed-in user; None for anonymous callers or on read failure"""
        if not user_id:
            return None

        try:
            visits = await self.store.list_visits(user_id=user_id)
            views = await self.store.list_restaurant_views(user_id=user_id)
            searches = await self.store.list_search_queries(user_id=user_id)
            restaurants = []
            if views:
                restaurants = await self.store.list_restaurants(ids={v.restaurant_id for v in views})
        except Exception as e:
            logger.error(f"Error loading progress for user {user_id}: {e}", exc_info=True)
            return None

        return build_user_progress(visits, views, searches, restaurants)
