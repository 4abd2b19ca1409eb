from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from typing import Optional, Literal
import logging
from vegmap.api.dependencies import get_record_store, get_tracking_context, get_optional_user_id
from vegmap.services.activity_tracker import ActivityTracker
from vegmap.services.progress_service import ProgressService
from vegmap.services.record_store import RecordStore
from vegmap.services.session_service import TrackingContext

router = APIRouter()
logger = logging.getLogger(__name__)


class VisitUpdateRequest(BaseModel):
    type: Literal["page_view", "restaurant_view", "search"]


class RestaurantViewRequest(BaseModel):
    restaurant_id: str
    source: Optional[str] = None


class SearchQueryRequest(BaseModel):
    query_text: str = Field(..., min_length=1, max_length=500)
    filter_category: Optional[str] = None
    results_count: int = Field(0, ge=0)


@router.post("/visit/start")
async def start_visit(
    request: Request,
    ctx: TrackingContext = Depends(get_tracking_context),
    store: RecordStore = Depends(get_record_store),
):
    """Open a visit for the browser session and count the landing page view"""
    tracker = ActivityTracker(store)
    session_id = await tracker.start_visit(
        ctx,
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
    )
    await tracker.update_visit(ctx, "page_view")
    return {"status": "ok", "session_id": session_id}


@router.post("/visit/update")
async def update_visit(
    payload: VisitUpdateRequest,
    ctx: TrackingContext = Depends(get_tracking_context),
    store: RecordStore = Depends(get_record_store),
):
    await ActivityTracker(store).update_visit(ctx, payload.type)
    return {"status": "ok"}


@router.post("/visit/end")
async def end_visit(
    ctx: TrackingContext = Depends(get_tracking_context),
    store: RecordStore = Depends(get_record_store),
):
    await ActivityTracker(store).end_visit(ctx)
    return {"status": "ok"}


@router.post("/restaurant-view")
async def track_restaurant_view(
    payload: RestaurantViewRequest,
    ctx: TrackingContext = Depends(get_tracking_context),
    store: RecordStore = Depends(get_record_store),
):
    await ActivityTracker(store).track_restaurant_view(ctx, payload.restaurant_id, payload.source)
    return {"status": "ok"}


@router.post("/search")
async def track_search(
    payload: SearchQueryRequest,
    ctx: TrackingContext = Depends(get_tracking_context),
    store: RecordStore = Depends(get_record_store),
):
    await ActivityTracker(store).track_search_query(
        ctx,
        payload.query_text,
        filter_category=payload.filter_category,
        results_count=payload.results_count,
    )
    return {"status": "ok"}


@router.get("/me")
async def get_my_progress(
    user_id: Optional[str] = Depends(get_optional_user_id),
    store: RecordStore = Depends(get_record_store),
):
    """Progress summary of the signed-in caller; null for anonymous callers"""
    return await ProgressService(store).get_user_progress(user_id)
