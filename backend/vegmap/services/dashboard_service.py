"""
Site-wide statistics for the admin dashboard.

The numbers are computed in memory from full record slices by pure
functions; ``DashboardService`` only loads the slices. The dashboard is
all-or-nothing: if any read fails the caller gets None, never a partially
filled result.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional, List, Sequence, Iterable, Tuple
import logging

from vegmap.services.record_store import (
    RecordStore,
    VisitRecord,
    RestaurantViewRecord,
    SearchQueryRecord,
    RestaurantRecord,
)
from vegmap.services.progress_service import average_duration, round_half_up

logger = logging.getLogger(__name__)

ACTIVITY_WINDOW_DAYS = 30
TOP_LIMIT = 10


def _count_in_order(keys: Iterable[str]) -> Dict[str, int]:
    """Occurrence counts keyed in first-encounter order"""
    counts: Dict[str, int] = {}
    for key in keys:
        counts[key] = counts.get(key, 0) + 1
    return counts


def _top(counts: Dict[str, int], limit: int = TOP_LIMIT) -> List[Tuple[str, int]]:
    # sorted() is stable, so equal counts keep first-encounter order
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]


def monthly_active_users(visits: Sequence[VisitRecord], since: datetime) -> int:
    return len({v.user_id for v in visits if v.user_id is not None and v.started_at >= since})


def restaurants_viewed_per_session(visits: Sequence[VisitRecord]) -> float:
    """Mean restaurants_viewed over finished visits, to one decimal"""
    finished = [v for v in visits if v.duration_seconds is not None]
    if not finished:
        return 0
    return round_half_up(sum(v.restaurants_viewed for v in finished) / len(finished), 1)


def popular_searches(searches: Sequence[SearchQueryRecord], limit: int = TOP_LIMIT) -> List[Dict[str, Any]]:
    counts = _count_in_order(s.query_text for s in searches)
    return [{"query": query, "count": count} for query, count in _top(counts, limit)]


def popular_restaurants(
    views: Sequence[RestaurantViewRecord],
    restaurants_by_id: Dict[str, RestaurantRecord],
    limit: int = TOP_LIMIT,
) -> List[Dict[str, Any]]:
    counts = _count_in_order(v.restaurant_id for v in views)
    result = []
    for restaurant_id, count in _top(counts, limit):
        restaurant = restaurants_by_id.get(restaurant_id)
        result.append({
            "restaurant_id": restaurant_id,
            "restaurant_name": restaurant.display_name if restaurant else "Unknown",
            "view_count": count,
        })
    return result


def views_by_category(
    views: Sequence[RestaurantViewRecord],
    restaurants_by_id: Dict[str, RestaurantRecord],
) -> List[Dict[str, Any]]:
    counts = _count_in_order(
        restaurants_by_id[v.restaurant_id].category
        for v in views
        if v.restaurant_id in restaurants_by_id
    )
    return [{"category": category, "count": count} for category, count in counts.items()]


def daily_activity(
    visits: Sequence[VisitRecord],
    views: Sequence[RestaurantViewRecord],
    searches: Sequence[SearchQueryRecord],
    since: datetime,
) -> List[Dict[str, Any]]:
    """Per-UTC-day event counts since ``since``; days without events are left out"""
    days: Dict[str, Dict[str, int]] = {}

    def add(timestamp: datetime, kind: str) -> None:
        if timestamp < since:
            return
        day = timestamp.astimezone(timezone.utc).date().isoformat()
        bucket = days.setdefault(day, {"visits": 0, "views": 0, "searches": 0})
        bucket[kind] += 1

    for v in visits:
        add(v.started_at, "visits")
    for v in views:
        add(v.viewed_at, "views")
    for s in searches:
        add(s.searched_at, "searches")

    return [{"date": day, **counts} for day, counts in sorted(days.items())]


def build_dashboard_stats(
    total_users: int,
    visits: Sequence[VisitRecord],
    views: Sequence[RestaurantViewRecord],
    searches: Sequence[SearchQueryRecord],
    restaurants: Sequence[RestaurantRecord],
    photo_restaurant_ids: Iterable[str],
    now: datetime,
) -> Dict[str, Any]:
    since = now - timedelta(days=ACTIVITY_WINDOW_DAYS)
    restaurants_by_id = {r.id: r for r in restaurants}
    finished_visits = [v for v in visits if v.duration_seconds is not None]

    return {
        # users
        "total_users": total_users,
        "monthly_active_users": monthly_active_users(visits, since),
        "average_session_duration": round_half_up(average_duration(finished_visits)),
        "restaurants_viewed_per_session": restaurants_viewed_per_session(visits),
        # content
        "total_restaurants": len(restaurants),
        "restaurants_with_photos": len({rid for rid in photo_restaurant_ids if rid}),
        # naver_place_id presence stands in for "has reviews"
        "restaurants_with_reviews": sum(1 for r in restaurants if r.naver_place_id is not None),
        "vegetarian_friendly_count": sum(1 for r in restaurants if r.category == "vegetarian-friendly"),
        # activity
        "total_restaurant_views": len(views),
        "total_search_queries": len(searches),
        "popular_searches": popular_searches(searches),
        "popular_restaurants": popular_restaurants(views, restaurants_by_id),
        "views_by_category": views_by_category(views, restaurants_by_id),
        "daily_activity": daily_activity(visits, views, searches, since),
    }


class DashboardService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def get_dashboard_stats(self, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        """Site-wide stats, or None if any underlying read fails"""
        now = now or datetime.now(timezone.utc)
        try:
            total_users = await self.store.count_users()
            visits = await self.store.list_visits()
            views = await self.store.list_restaurant_views()
            searches = await self.store.list_search_queries()
            restaurants = await self.store.list_restaurants()
            photo_restaurant_ids = await self.store.list_photo_restaurant_ids()
        except Exception as e:
            logger.error(f"Error loading dashboard stats: {e}", exc_info=True)
            return None

        return build_dashboard_stats(
            total_users=total_users,
            visits=visits,
            views=views,
            searches=searches,
            restaurants=restaurants,
            photo_restaurant_ids=photo_restaurant_ids,
            now=now,
        )
