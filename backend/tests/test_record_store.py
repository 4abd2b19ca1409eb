from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from vegmap.models.restaurant import Restaurant, RestaurantPhoto
from vegmap.models.user import User
from vegmap.models.user_visit import UserVisit
from vegmap.services.activity_tracker import ActivityTracker
from vegmap.services.dashboard_service import DashboardService
from vegmap.services.progress_service import ProgressService
from vegmap.services.record_store import SqlRecordStore
from vegmap.services.session_service import TrackingContext

T0 = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


async def add_restaurant(db, name_en, category="vegan", **kwargs):
    restaurant = Restaurant(
        name_en=name_en,
        name_ko=name_en,
        category=category,
        address_en="Seoul",
        address_ko="서울",
        latitude=37.5,
        longitude=127.0,
        **kwargs,
    )
    db.add(restaurant)
    await db.commit()
    return restaurant


async def test_counter_upsert_creates_then_reuses_visit(db):
    store = SqlRecordStore(db)

    await store.increment_visit_counter("s1", "page_views", T0, user_id=None)
    await store.increment_visit_counter("s1", "page_views", T0 + timedelta(seconds=5))

    visits = (await db.execute(select(UserVisit))).scalars().all()
    assert len(visits) == 1
    assert visits[0].page_views == 2
    assert visits[0].user_id is None


async def test_counter_goes_to_latest_visit(db):
    store = SqlRecordStore(db)
    await store.start_visit("s1", T0)
    await store.start_visit("s1", T0 + timedelta(hours=1))

    await store.increment_visit_counter("s1", "searches_performed", T0 + timedelta(hours=1, minutes=1))

    visits = await store.list_visits()
    assert [v.searches_performed for v in visits] == [0, 1]


async def test_unknown_counter_is_rejected(db):
    with pytest.raises(ValueError):
        await SqlRecordStore(db).increment_visit_counter("s1", "user_agent", T0)


async def test_long_headers_are_clipped_to_column_width(db):
    store = SqlRecordStore(db)

    await store.start_visit("s1", T0, user_agent="a" * 700, referrer="https://example.com/" + "x" * 600)

    visit = (await db.execute(select(UserVisit))).scalar_one()
    assert len(visit.user_agent) == 500
    assert len(visit.referrer) == 500
    assert visit.referrer.startswith("https://example.com/")


async def test_end_visit_computes_duration(db):
    store = SqlRecordStore(db)
    await store.start_visit("s1", T0)

    await store.end_visit("s1", T0 + timedelta(seconds=125))

    [visit] = await store.list_visits()
    assert visit.duration_seconds == 125
    assert visit.ended_at == T0 + timedelta(seconds=125)


async def test_end_visit_without_visit_is_a_no_op(db):
    store = SqlRecordStore(db)

    await store.end_visit("nobody", T0)

    assert await store.list_visits() == []


async def test_tracked_views_match_visit_counter(db):
    restaurant = await add_restaurant(db, "Plant")
    tracker = ActivityTracker(SqlRecordStore(db))
    ctx = TrackingContext(session_id="s1")

    await tracker.start_visit(ctx)
    for _ in range(4):
        await tracker.track_restaurant_view(ctx, restaurant.id, "list")

    store = SqlRecordStore(db)
    views = await store.list_restaurant_views()
    [visit] = await store.list_visits()
    assert len(views) == 4
    assert visit.restaurants_viewed == 4
    assert all(v.user_id is None for v in views)


async def test_progress_and_dashboard_end_to_end(db):
    user = User(auth_provider_id="sub-1")
    db.add(user)
    await db.commit()
    vegan = await add_restaurant(db, "Plant", naver_place_id="999")
    friendly = await add_restaurant(db, "Gwangjang", category="vegetarian-friendly")
    db.add(RestaurantPhoto(restaurant_id=vegan.id, storage_path="photos/1.jpg"))
    await db.commit()

    tracker = ActivityTracker(SqlRecordStore(db))
    ctx = TrackingContext(session_id="s1", user_id=user.id)
    await tracker.start_visit(ctx)
    await tracker.track_restaurant_view(ctx, vegan.id, "map")
    await tracker.track_restaurant_view(ctx, friendly.id, "map")
    await tracker.track_restaurant_view(ctx, vegan.id, "list")
    await tracker.track_search_query(ctx, "tofu", results_count=2)
    await tracker.end_visit(ctx)

    progress = await ProgressService(SqlRecordStore(db)).get_user_progress(user.id)
    assert progress["total_visits"] == 1
    assert progress["total_restaurants_viewed"] == 3
    assert progress["favorite_categories"] == [
        {"category": "vegan", "count": 2},
        {"category": "vegetarian-friendly", "count": 1},
    ]
    assert progress["recent_searches"][0]["query_text"] == "tofu"

    stats = await DashboardService(SqlRecordStore(db)).get_dashboard_stats()
    assert stats["total_users"] == 1
    assert stats["monthly_active_users"] == 1
    assert stats["total_restaurants"] == 2
    assert stats["restaurants_with_photos"] == 1
    assert stats["restaurants_with_reviews"] == 1
    assert stats["vegetarian_friendly_count"] == 1
    assert stats["restaurants_viewed_per_session"] == 3.0
    assert stats["popular_restaurants"][0] == {
        "restaurant_id": vegan.id,
        "restaurant_name": "Plant",
        "view_count": 2,
    }
    assert sum(day["views"] for day in stats["daily_activity"]) == 3
