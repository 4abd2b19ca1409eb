from sqlalchemy import Column, String, Text, JSON, DateTime, Float, Boolean, ForeignKey, Index
from sqlalchemy.sql import func
import uuid
from vegmap.database.connection import Base

CATEGORIES = ("vegetarian", "vegan", "vegetarian-friendly")
PRICE_RANGES = ("budget", "mid-range", "upscale")
PHOTO_TYPES = ("restaurant", "side_dish")
SUGGESTION_STATUSES = ("pending", "approved", "rejected")


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name_en = Column(String(255), nullable=False)
    name_ko = Column(String(255), nullable=False)
    category = Column(String(32), nullable=False, index=True)  # vegetarian, vegan, vegetarian-friendly
    address_en = Column(String(500), nullable=False)
    address_ko = Column(String(500), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    menu_items = Column(JSON, nullable=True)  # [{name_en, name_ko, price}]
    operating_hours = Column(JSON, nullable=True)  # {mon: "11:00-22:00", ...}
    price_range = Column(String(16), nullable=True)  # budget, mid-range, upscale
    description_en = Column(Text, nullable=True)
    description_ko = Column(Text, nullable=True)
    naver_place_id = Column(String(64), nullable=True)
    offers_side_dish_only = Column(Boolean, nullable=False, default=False)
    ordering_tips_en = Column(Text, nullable=True)
    ordering_tips_ko = Column(Text, nullable=True)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class RestaurantPhoto(Base):
    __tablename__ = "restaurant_photos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    storage_path = Column(String(500), nullable=False)
    caption_en = Column(String(500), nullable=True)
    caption_ko = Column(String(500), nullable=True)
    uploaded_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())
    is_primary = Column(Boolean, nullable=False, default=False)
    photo_type = Column(String(16), nullable=False, default="restaurant")


class SideDishNote(Base):
    __tablename__ = "restaurant_side_dish_notes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    side_dish_name_ko = Column(String(255), nullable=False)
    side_dish_name_en = Column(String(255), nullable=True)
    description_en = Column(Text, nullable=True)
    description_ko = Column(Text, nullable=True)
    is_vegetarian = Column(Boolean, nullable=False, default=False)
    is_vegan = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=True)
    ordering_phrase_ko = Column(String(500), nullable=True)
    ordering_phrase_en = Column(String(500), nullable=True)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class RestaurantEditSuggestion(Base):
    __tablename__ = "restaurant_edit_suggestions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    suggested_by = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    field_name = Column(String(64), nullable=False)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default="pending", index=True)
    reviewed_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('ix_restaurant_edit_suggestions_status_created', 'status', 'created_at'),
    )
