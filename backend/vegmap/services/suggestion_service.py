"""
Crowd-sourced restaurant edit suggestions and their moderation.
"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional, List
from datetime import datetime, timezone
import logging

from vegmap.models.restaurant import Restaurant, RestaurantEditSuggestion, SUGGESTION_STATUSES
from vegmap.services.restaurant_service import EDITABLE_FIELDS, validate_restaurant_fields

logger = logging.getLogger(__name__)

FLOAT_FIELDS = ("latitude", "longitude")
BOOL_FIELDS = ("offers_side_dish_only", "is_verified")
# structured columns cannot be set from a single text value
UNSUGGESTABLE_FIELDS = ("menu_items", "operating_hours")


class SuggestionError(Exception):
    """A suggestion cannot be created or applied"""


def coerce_value(field_name: str, value: str):
    """Convert a suggested text value to the restaurant column's type"""
    if field_name in FLOAT_FIELDS:
        try:
            return float(value)
        except ValueError:
            raise SuggestionError(f"{field_name} must be a number")
    if field_name in BOOL_FIELDS:
        return value.strip().lower() in ("1", "true", "yes")
    return value


class SuggestionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_suggestion(
        self,
        restaurant_id: str,
        suggested_by: str,
        field_name: str,
        new_value: str,
        old_value: Optional[str] = None,
    ) -> RestaurantEditSuggestion:
        if field_name not in EDITABLE_FIELDS or field_name in UNSUGGESTABLE_FIELDS:
            raise SuggestionError(f"Field cannot be edited: {field_name}")

        suggestion = RestaurantEditSuggestion(
            restaurant_id=restaurant_id,
            suggested_by=suggested_by,
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
            status="pending",
            created_at=datetime.now(timezone.utc),
        )
        self.db.add(suggestion)
        await self.db.commit()
        await self.db.refresh(suggestion)
        return suggestion

    async def list_suggestions(self, status: Optional[str] = None) -> List[RestaurantEditSuggestion]:
        """All suggestions newest first, optionally by status"""
        query = select(RestaurantEditSuggestion)
        if status:
            query = query.where(RestaurantEditSuggestion.status == status)
        query = query.order_by(RestaurantEditSuggestion.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_suggestion(self, suggestion_id: str) -> Optional[RestaurantEditSuggestion]:
        result = await self.db.execute(
            select(RestaurantEditSuggestion).where(RestaurantEditSuggestion.id == suggestion_id)
        )
        return result.scalar_one_or_none()

    async def update_status(
        self,
        suggestion_id: str,
        status: str,
        reviewed_by: str,
    ) -> Optional[RestaurantEditSuggestion]:
        if status not in SUGGESTION_STATUSES:
            raise SuggestionError(f"Invalid status: {status}")

        suggestion = await self.get_suggestion(suggestion_id)
        if suggestion is None:
            return None

        suggestion.status = status
        suggestion.reviewed_by = reviewed_by
        suggestion.reviewed_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(suggestion)
        return suggestion

    async def _resolve_change(self, suggestion: RestaurantEditSuggestion):
        """Target restaurant and typed value; raises before anything is written"""
        if suggestion.field_name not in EDITABLE_FIELDS or suggestion.field_name in UNSUGGESTABLE_FIELDS:
            raise SuggestionError(f"Field cannot be edited: {suggestion.field_name}")

        result = await self.db.execute(select(Restaurant).where(Restaurant.id == suggestion.restaurant_id))
        restaurant = result.scalar_one_or_none()
        if restaurant is None:
            raise SuggestionError("Restaurant not found")

        value = coerce_value(suggestion.field_name, suggestion.new_value)
        try:
            validate_restaurant_fields({suggestion.field_name: value})
        except ValueError as e:
            raise SuggestionError(str(e))
        return restaurant, value

    async def _write_change(self, suggestion: RestaurantEditSuggestion, restaurant: Restaurant, value) -> Restaurant:
        setattr(restaurant, suggestion.field_name, value)
        restaurant.updated_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(restaurant)
        logger.info(f"Applied suggestion {suggestion.id} to restaurant {restaurant.id} ({suggestion.field_name})")
        return restaurant

    async def apply_suggestion(self, suggestion_id: str) -> Restaurant:
        """Write an approved suggestion's new value into its restaurant"""
        suggestion = await self.get_suggestion(suggestion_id)
        if suggestion is None:
            raise SuggestionError("Suggestion not found")
        if suggestion.status != "approved":
            raise SuggestionError("Suggestion is not approved")

        restaurant, value = await self._resolve_change(suggestion)
        return await self._write_change(suggestion, restaurant, value)

    async def approve(self, suggestion_id: str, reviewed_by: str) -> Optional[Restaurant]:
        """Approve and apply in one commit; None when the suggestion does not exist.

        A suggestion whose value cannot be applied stays pending.
        """
        suggestion = await self.get_suggestion(suggestion_id)
        if suggestion is None:
            return None

        restaurant, value = await self._resolve_change(suggestion)

        suggestion.status = "approved"
        suggestion.reviewed_by = reviewed_by
        suggestion.reviewed_at = datetime.now(timezone.utc)
        return await self._write_change(suggestion, restaurant, value)
