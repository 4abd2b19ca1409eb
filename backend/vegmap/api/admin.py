from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, Field
from typing import Dict, Any, Optional, List, Literal
from datetime import datetime
import logging
from vegmap.database.connection import get_db
from vegmap.api.dependencies import require_admin, get_record_store
from vegmap.api.restaurants import RestaurantResponse, Category, PriceRange
from vegmap.models.user import User
from vegmap.services.dashboard_service import DashboardService
from vegmap.services.record_store import RecordStore
from vegmap.services.restaurant_service import RestaurantService
from vegmap.services.suggestion_service import SuggestionService, SuggestionError

router = APIRouter()
logger = logging.getLogger(__name__)


class RestaurantCreate(BaseModel):
    name_en: str = Field(..., min_length=1)
    name_ko: str = Field(..., min_length=1)
    category: Category
    address_en: str
    address_ko: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    menu_items: Optional[List[Dict[str, Any]]] = None
    operating_hours: Optional[Dict[str, str]] = None
    price_range: Optional[PriceRange] = None
    description_en: Optional[str] = None
    description_ko: Optional[str] = None
    naver_place_id: Optional[str] = None
    offers_side_dish_only: bool = False
    ordering_tips_en: Optional[str] = None
    ordering_tips_ko: Optional[str] = None
    is_verified: bool = False


class RestaurantUpdate(BaseModel):
    name_en: Optional[str] = None
    name_ko: Optional[str] = None
    category: Optional[Category] = None
    address_en: Optional[str] = None
    address_ko: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    menu_items: Optional[List[Dict[str, Any]]] = None
    operating_hours: Optional[Dict[str, str]] = None
    price_range: Optional[PriceRange] = None
    description_en: Optional[str] = None
    description_ko: Optional[str] = None
    naver_place_id: Optional[str] = None
    offers_side_dish_only: Optional[bool] = None
    ordering_tips_en: Optional[str] = None
    ordering_tips_ko: Optional[str] = None
    is_verified: Optional[bool] = None


class SuggestionResponse(BaseModel):
    id: str
    restaurant_id: str
    suggested_by: str
    field_name: str
    old_value: Optional[str] = None
    new_value: str
    status: str
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


@router.get("/dashboard")
async def get_dashboard(
    admin: User = Depends(require_admin()),
    store: RecordStore = Depends(get_record_store),
):
    """Site-wide analytics; null when the stats could not be loaded"""
    return await DashboardService(store).get_dashboard_stats()


@router.get("/restaurants", response_model=List[RestaurantResponse])
async def list_restaurants(
    admin: User = Depends(require_admin()),
    db: AsyncSession = Depends(get_db)
):
    return await RestaurantService(db).list_restaurants()


@router.post("/restaurants", response_model=RestaurantResponse, status_code=201)
async def create_restaurant(
    payload: RestaurantCreate,
    admin: User = Depends(require_admin()),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await RestaurantService(db).create_restaurant(payload.model_dump(), created_by=admin.id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/restaurants/{restaurant_id}", response_model=RestaurantResponse)
async def update_restaurant(
    restaurant_id: str,
    payload: RestaurantUpdate,
    admin: User = Depends(require_admin()),
    db: AsyncSession = Depends(get_db)
):
    try:
        restaurant = await RestaurantService(db).update_restaurant(
            restaurant_id, payload.model_dump(exclude_unset=True)
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if restaurant is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


@router.delete("/restaurants/{restaurant_id}", status_code=204)
async def delete_restaurant(
    restaurant_id: str,
    admin: User = Depends(require_admin()),
    db: AsyncSession = Depends(get_db)
):
    if not await RestaurantService(db).delete_restaurant(restaurant_id):
        raise HTTPException(status_code=404, detail="Restaurant not found")


@router.get("/suggestions", response_model=List[SuggestionResponse])
async def list_suggestions(
    status: Literal["pending", "approved", "rejected", "all"] = "pending",
    admin: User = Depends(require_admin()),
    db: AsyncSession = Depends(get_db)
):
    """Edit suggestions, pending by default"""
    return await SuggestionService(db).list_suggestions(status=None if status == "all" else status)


@router.post("/suggestions/{suggestion_id}/approve", response_model=RestaurantResponse)
async def approve_suggestion(
    suggestion_id: str,
    admin: User = Depends(require_admin()),
    db: AsyncSession = Depends(get_db)
):
    """Approve a suggestion and write it into the restaurant"""
    try:
        restaurant = await SuggestionService(db).approve(suggestion_id, reviewed_by=admin.id)
    except SuggestionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if restaurant is None:
        raise HTTPException(status_code=404, detail="Suggestion not found")
    return restaurant


@router.post("/suggestions/{suggestion_id}/reject", response_model=SuggestionResponse)
async def reject_suggestion(
    suggestion_id: str,
    admin: User = Depends(require_admin()),
    db: AsyncSession = Depends(get_db)
):
    suggestion = await SuggestionService(db).update_status(suggestion_id, "rejected", reviewed_by=admin.id)
    if suggestion is None:
        raise HTTPException(status_code=404, detail="Suggestion not found")
    return suggestion
