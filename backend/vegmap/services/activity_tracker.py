from datetime import datetime, timezone
from typing import Optional
import logging

from vegmap.services.record_store import RecordStore
from vegmap.services.session_service import TrackingContext

logger = logging.getLogger(__name__)

VISIT_EVENT_FIELDS = {
    "page_view": "page_views",
    "restaurant_view": "restaurants_viewed",
    "search": "searches_performed",
}


class ActivityTracker:
    """Fire-and-forget recorder of page views, restaurant views and searches.

    Nothing here raises: a failed write is logged and dropped so that the
    user-facing action which triggered tracking always completes.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def start_visit(
        self,
        ctx: TrackingContext,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> str:
        """Open a new visit row for the session"""
        try:
            await self.store.start_visit(
                session_id=ctx.session_id,
                started_at=datetime.now(timezone.utc),
                user_id=ctx.user_id,
                user_agent=user_agent,
                referrer=referrer,
            )
        except Exception as e:
            logger.error(f"Error starting user visit: {e}", exc_info=True)
        return ctx.session_id

    async def update_visit(self, ctx: TrackingContext, kind: str) -> None:
        """Bump the current visit's counter for a page_view, restaurant_view or search"""
        field = VISIT_EVENT_FIELDS.get(kind)
        if field is None:
            logger.warning(f"Ignoring unknown visit event type: {kind}")
            return

        try:
            await self.store.increment_visit_counter(
                session_id=ctx.session_id,
                field=field,
                now=datetime.now(timezone.utc),
                user_id=ctx.user_id,
            )
        except Exception as e:
            logger.error(f"Error updating user visit ({kind}): {e}", exc_info=True)

    async def track_restaurant_view(
        self,
        ctx: TrackingContext,
        restaurant_id: str,
        source: Optional[str] = None,
    ) -> None:
        try:
            await self.store.add_restaurant_view(
                restaurant_id=restaurant_id,
                session_id=ctx.session_id,
                viewed_at=datetime.now(timezone.utc),
                user_id=ctx.user_id,
                source=source or "unknown",
            )
        except Exception as e:
            logger.error(f"Error tracking restaurant view {restaurant_id}: {e}", exc_info=True)

        await self.update_visit(ctx, "restaurant_view")

    async def track_search_query(
        self,
        ctx: TrackingContext,
        query_text: str,
        filter_category: Optional[str] = None,
        results_count: int = 0,
    ) -> None:
        try:
            await self.store.add_search_query(
                session_id=ctx.session_id,
                query_text=query_text,
                searched_at=datetime.now(timezone.utc),
                user_id=ctx.user_id,
                filter_category=filter_category or None,
                results_count=results_count,
            )
        except Exception as e:
            logger.error(f"Error tracking search query: {e}", exc_info=True)

        await self.update_visit(ctx, "search")

    async def end_visit(self, ctx: TrackingContext) -> None:
        """Stamp ended_at and duration_seconds on the current visit"""
        try:
            await self.store.end_visit(ctx.session_id, datetime.now(timezone.utc))
        except Exception as e:
            logger.error(f"Error ending user visit: {e}", exc_info=True)
