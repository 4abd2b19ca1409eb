from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel, Field
from typing import Optional
from vegmap.database.connection import get_db
from vegmap.api.dependencies import get_current_user
from vegmap.api.admin import SuggestionResponse
from vegmap.models.user import User
from vegmap.services.restaurant_service import RestaurantService
from vegmap.services.suggestion_service import SuggestionService, SuggestionError

router = APIRouter()


class SuggestionCreate(BaseModel):
    restaurant_id: str
    field_name: str
    new_value: str = Field(..., min_length=1)
    old_value: Optional[str] = None


@router.post("", response_model=SuggestionResponse, status_code=201)
async def create_suggestion(
    payload: SuggestionCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Suggest a correction to a restaurant; admins review it later"""
    if await RestaurantService(db).get_restaurant(payload.restaurant_id) is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")

    try:
        return await SuggestionService(db).create_suggestion(
            restaurant_id=payload.restaurant_id,
            suggested_by=current_user.id,
            field_name=payload.field_name,
            new_value=payload.new_value,
            old_value=payload.old_value,
        )
    except SuggestionError as e:
        raise HTTPException(status_code=400, detail=str(e))
