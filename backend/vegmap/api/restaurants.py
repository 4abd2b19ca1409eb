from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, Field
from typing import Dict, Any, Optional, List, Literal
from datetime import datetime
import logging
from vegmap.database.connection import get_db
from vegmap.api.dependencies import get_current_user
from vegmap.models.user import User
from vegmap.services.restaurant_service import RestaurantService
from vegmap.services.restaurant_filters import FilterOptions, apply_filters
from vegmap.services.side_dish_service import SideDishService
from vegmap.services.naver_review_service import NaverReviewService

router = APIRouter()
logger = logging.getLogger(__name__)

Category = Literal["vegetarian", "vegan", "vegetarian-friendly"]
PriceRange = Literal["budget", "mid-range", "upscale"]


class RestaurantResponse(BaseModel):
    id: str
    name_en: str
    name_ko: str
    category: str
    address_en: str
    address_ko: str
    latitude: float
    longitude: float
    menu_items: Optional[List[Dict[str, Any]]] = None
    operating_hours: Optional[Dict[str, str]] = None
    price_range: Optional[str] = None
    description_en: Optional[str] = None
    description_ko: Optional[str] = None
    naver_place_id: Optional[str] = None
    offers_side_dish_only: bool = False
    ordering_tips_en: Optional[str] = None
    ordering_tips_ko: Optional[str] = None
    created_by: Optional[str] = None
    is_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PhotoResponse(BaseModel):
    id: str
    restaurant_id: str
    storage_path: str
    caption_en: Optional[str] = None
    caption_ko: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    is_primary: bool = False
    photo_type: str

    class Config:
        from_attributes = True


class SideDishNoteResponse(BaseModel):
    id: str
    restaurant_id: str
    side_dish_name_ko: str
    side_dish_name_en: Optional[str] = None
    description_en: Optional[str] = None
    description_ko: Optional[str] = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    notes: Optional[str] = None
    ordering_phrase_ko: Optional[str] = None
    ordering_phrase_en: Optional[str] = None
    is_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RestaurantDetailResponse(RestaurantResponse):
    photos: List[PhotoResponse] = []
    side_dish_notes: List[SideDishNoteResponse] = []


class SideDishNoteCreate(BaseModel):
    side_dish_name_ko: str = Field(..., min_length=1)
    side_dish_name_en: Optional[str] = None
    description_en: Optional[str] = None
    description_ko: Optional[str] = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    notes: Optional[str] = None
    ordering_phrase_ko: Optional[str] = None
    ordering_phrase_en: Optional[str] = None


class SideDishNoteUpdate(BaseModel):
    side_dish_name_ko: Optional[str] = None
    side_dish_name_en: Optional[str] = None
    description_en: Optional[str] = None
    description_ko: Optional[str] = None
    is_vegetarian: Optional[bool] = None
    is_vegan: Optional[bool] = None
    notes: Optional[str] = None
    ordering_phrase_ko: Optional[str] = None
    ordering_phrase_en: Optional[str] = None


@router.get("", response_model=List[RestaurantResponse])
async def list_restaurants(
    category: Optional[str] = None,
    price_range: Optional[PriceRange] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Restaurants, newest first"""
    return await RestaurantService(db).list_restaurants(category=category, price_range=price_range, search=search)


@router.get("/browse", response_model=List[RestaurantResponse])
async def browse_restaurants(
    categories: List[Category] = Query([]),
    price_ranges: List[PriceRange] = Query([]),
    side_dish_only: bool = False,
    verified: bool = False,
    search: str = "",
    sort_by: Literal["name", "category", "price"] = "name",
    language: Literal["en", "ko"] = "en",
    db: AsyncSession = Depends(get_db)
):
    """Homepage listing: filter, search and sort the full collection"""
    restaurants = await RestaurantService(db).list_restaurants()
    filters = FilterOptions(
        categories=list(categories),
        price_ranges=list(price_ranges),
        side_dish_only=side_dish_only,
        verified=verified,
        sort_by=sort_by,
    )
    return apply_filters(restaurants, filters, search=search, language=language)


@router.get("/search")
async def search_restaurants(
    q: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db)
):
    result = await RestaurantService(db).search_restaurants(q)
    return {
        "restaurants": [RestaurantResponse.model_validate(r) for r in result["restaurants"]],
        "total": result["total"],
    }


@router.get("/{restaurant_id}", response_model=RestaurantDetailResponse)
async def get_restaurant(restaurant_id: str, db: AsyncSession = Depends(get_db)):
    details = await RestaurantService(db).get_restaurant_details(restaurant_id)
    if details is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    payload = RestaurantResponse.model_validate(details["restaurant"]).model_dump()
    payload["photos"] = [PhotoResponse.model_validate(p) for p in details["photos"]]
    payload["side_dish_notes"] = [SideDishNoteResponse.model_validate(n) for n in details["side_dish_notes"]]
    return payload


@router.get("/{restaurant_id}/side-dishes", response_model=List[SideDishNoteResponse])
async def list_side_dish_notes(restaurant_id: str, db: AsyncSession = Depends(get_db)):
    return await SideDishService(db).list_notes(restaurant_id)


@router.post("/{restaurant_id}/side-dishes", response_model=SideDishNoteResponse, status_code=201)
async def create_side_dish_note(
    restaurant_id: str,
    payload: SideDishNoteCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Contribute a side-dish note; it stays hidden until verified"""
    if await RestaurantService(db).get_restaurant(restaurant_id) is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return await SideDishService(db).create_note(restaurant_id, payload.model_dump(), created_by=current_user.id)


@router.patch("/side-dishes/{note_id}", response_model=SideDishNoteResponse)
async def update_side_dish_note(
    note_id: str,
    payload: SideDishNoteUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = SideDishService(db)
    note = await service.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Side dish note not found")
    if note.created_by != current_user.id and current_user.role != "admin":
        raise HTTPException(status_code=403, detail="Not allowed to edit this note")
    return await service.update_note(note_id, payload.model_dump(exclude_unset=True))


@router.delete("/side-dishes/{note_id}", status_code=204)
async def delete_side_dish_note(
    note_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    service = SideDishService(db)
    note = await service.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Side dish note not found")
    if note.created_by != current_user.id and current_user.role != "admin":
        raise HTTPException(status_code=403, detail="Not allowed to delete this note")
    await service.delete_note(note_id)


@router.get("/{restaurant_id}/reviews")
async def get_restaurant_reviews(restaurant_id: str, db: AsyncSession = Depends(get_db)):
    """Naver reviews mentioning side dishes or vegetables, keywords in highlighted_content wrapped in <mark>"""
    restaurant = await RestaurantService(db).get_restaurant(restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    async with NaverReviewService() as service:
        reviews = await service.get_filtered_reviews(restaurant.name_ko)
    return {"restaurant_id": restaurant_id, "reviews": [r.to_dict() for r in reviews]}
