from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import Dict, Any, Optional, List
from datetime import datetime, timezone
import logging

from vegmap.models.restaurant import (
    Restaurant,
    RestaurantPhoto,
    SideDishNote,
    CATEGORIES,
    PRICE_RANGES,
)

logger = logging.getLogger(__name__)

# columns an admin form or an approved edit suggestion may write
EDITABLE_FIELDS = (
    "name_en",
    "name_ko",
    "category",
    "address_en",
    "address_ko",
    "latitude",
    "longitude",
    "menu_items",
    "operating_hours",
    "price_range",
    "description_en",
    "description_ko",
    "naver_place_id",
    "offers_side_dish_only",
    "ordering_tips_en",
    "ordering_tips_ko",
    "is_verified",
)
# NOT NULL columns
REQUIRED_FIELDS = (
    "name_en",
    "name_ko",
    "category",
    "address_en",
    "address_ko",
    "latitude",
    "longitude",
    "offers_side_dish_only",
    "is_verified",
)
COORDINATE_BOUNDS = {"latitude": (-90, 90), "longitude": (-180, 180)}


def _text_search_condition(search: str):
    pattern = f"%{search.strip().lower()}%"
    return or_(
        Restaurant.name_en.ilike(pattern),
        Restaurant.name_ko.ilike(pattern),
        Restaurant.address_en.ilike(pattern),
        Restaurant.address_ko.ilike(pattern),
    )


def validate_restaurant_fields(data: Dict[str, Any]) -> None:
    unknown = set(data) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown restaurant fields: {', '.join(sorted(unknown))}")
    for name in REQUIRED_FIELDS:
        if name in data and data[name] is None:
            raise ValueError(f"{name} cannot be empty")
    for name, (low, high) in COORDINATE_BOUNDS.items():
        if name in data and not low <= data[name] <= high:
            raise ValueError(f"{name} must be between {low} and {high}")
    if "category" in data and data["category"] not in CATEGORIES:
        raise ValueError(f"Invalid category: {data['category']}")
    if data.get("price_range") is not None and data["price_range"] not in PRICE_RANGES:
        raise ValueError(f"Invalid price range: {data['price_range']}")


class RestaurantService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_restaurants(
        self,
        category: Optional[str] = None,
        price_range: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Restaurant]:
        """All restaurants, newest first, with optional DB-side filters"""
        query = select(Restaurant)
        if category and category != "all":
            query = query.where(Restaurant.category == category)
        if price_range:
            query = query.where(Restaurant.price_range == price_range)
        if search and search.strip():
            query = query.where(_text_search_condition(search))

        query = query.order_by(Restaurant.created_at.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def search_restaurants(self, query_text: str) -> Dict[str, Any]:
        restaurants = await self.list_restaurants(search=query_text)
        return {"restaurants": restaurants, "total": len(restaurants)}

    async def get_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        result = await self.db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
        return result.scalar_one_or_none()

    async def get_restaurant_details(self, restaurant_id: str) -> Optional[Dict[str, Any]]:
        """Restaurant with photos (primary first) and verified side-dish notes"""
        restaurant = await self.get_restaurant(restaurant_id)
        if restaurant is None:
            return None

        photos_result = await self.db.execute(
            select(RestaurantPhoto)
            .where(RestaurantPhoto.restaurant_id == restaurant_id)
            .order_by(RestaurantPhoto.is_primary.desc(), RestaurantPhoto.uploaded_at.desc())
        )
        notes_result = await self.db.execute(
            select(SideDishNote)
            .where(
                SideDishNote.restaurant_id == restaurant_id,
                SideDishNote.is_verified.is_(True),
            )
            .order_by(SideDishNote.created_at.desc())
        )

        return {
            "restaurant": restaurant,
            "photos": list(photos_result.scalars().all()),
            "side_dish_notes": list(notes_result.scalars().all()),
        }

    async def create_restaurant(self, data: Dict[str, Any], created_by: Optional[str] = None) -> Restaurant:
        validate_restaurant_fields(data)
        now = datetime.now(timezone.utc)
        restaurant = Restaurant(**data, created_by=created_by, created_at=now, updated_at=now)
        self.db.add(restaurant)
        await self.db.commit()
        await self.db.refresh(restaurant)
        logger.info(f"Created restaurant {restaurant.id} ({restaurant.name_en})")
        return restaurant

    async def update_restaurant(self, restaurant_id: str, updates: Dict[str, Any]) -> Optional[Restaurant]:
        validate_restaurant_fields(updates)
        restaurant = await self.get_restaurant(restaurant_id)
        if restaurant is None:
            return None

        for name, value in updates.items():
            setattr(restaurant, name, value)
        restaurant.updated_at = datetime.now(timezone.utc)

        await self.db.commit()
        await self.db.refresh(restaurant)
        return restaurant

    async def delete_restaurant(self, restaurant_id: str) -> bool:
        restaurant = await self.get_restaurant(restaurant_id)
        if restaurant is None:
            return False

        await self.db.delete(restaurant)
        await self.db.commit()
        logger.info(f"Deleted restaurant {restaurant_id}")
        return True
