from vegmap.services.activity_tracker import ActivityTracker
from vegmap.services.session_service import TrackingContext


async def test_restaurant_views_bump_the_visit_counter(store):
    ctx = TrackingContext(session_id="s1", user_id="u1")
    tracker = ActivityTracker(store)

    await tracker.start_visit(ctx)
    for _ in range(3):
        await tracker.track_restaurant_view(ctx, "r1", "map")

    assert len(store.views) == 3
    assert store.current_visit("s1").restaurants_viewed == 3
    assert all(v.source == "map" for v in store.views)


async def test_counter_update_without_open_visit_creates_one(store):
    ctx = TrackingContext(session_id="s1", user_id=None)

    await ActivityTracker(store).update_visit(ctx, "page_view")

    assert len(store.visits) == 1
    assert store.visits[0].page_views == 1
    assert store.visits[0].user_id is None


async def test_anonymous_events_have_no_user(store):
    ctx = TrackingContext(session_id="anon", user_id=None)
    tracker = ActivityTracker(store)

    await tracker.track_restaurant_view(ctx, "r1")
    await tracker.track_search_query(ctx, "tofu", filter_category="", results_count=4)

    assert store.views[0].user_id is None
    assert store.views[0].source == "unknown"
    assert store.searches[0].user_id is None
    assert store.searches[0].filter_category is None
    assert store.searches[0].results_count == 4
    assert store.current_visit("anon").searches_performed == 1


async def test_unknown_event_type_is_ignored(store):
    ctx = TrackingContext(session_id="s1")

    await ActivityTracker(store).update_visit(ctx, "scroll")

    assert store.visits == []


async def test_end_visit_sets_duration(store):
    ctx = TrackingContext(session_id="s1", user_id="u1")
    tracker = ActivityTracker(store)

    await tracker.start_visit(ctx)
    await tracker.end_visit(ctx)

    visit = store.current_visit("s1")
    assert visit.ended_at is not None
    assert visit.duration_seconds >= 0


async def test_failing_store_never_raises(failing_store):
    ctx = TrackingContext(session_id="s1", user_id="u1")
    tracker = ActivityTracker(failing_store)

    assert await tracker.start_visit(ctx) == "s1"
    await tracker.update_visit(ctx, "page_view")
    await tracker.track_restaurant_view(ctx, "r1")
    await tracker.track_search_query(ctx, "kimchi")
    await tracker.end_visit(ctx)
