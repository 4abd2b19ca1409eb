from sqlalchemy import Column, String, DateTime, ForeignKey, Index
import uuid
from vegmap.database.connection import Base


class RestaurantView(Base):
    __tablename__ = "restaurant_views"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    session_id = Column(String(64), nullable=False, index=True)
    viewed_at = Column(DateTime(timezone=True), nullable=False, index=True)
    source = Column(String(32), nullable=True)  # detail_page, map, search, direct

    __table_args__ = (
        Index('ix_restaurant_views_user_viewed', 'user_id', 'viewed_at'),
    )
