from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Index
import uuid
from vegmap.database.connection import Base


class UserVisit(Base):
    __tablename__ = "user_visits"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    session_id = Column(String(64), nullable=False, index=True)
    started_at = Column(DateTime(timezone=True), nullable=False, index=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    page_views = Column(Integer, nullable=False, default=0)
    restaurants_viewed = Column(Integer, nullable=False, default=0)
    searches_performed = Column(Integer, nullable=False, default=0)
    user_agent = Column(String(500), nullable=True)
    referrer = Column(String(500), nullable=True)

    __table_args__ = (
        Index('ix_user_visits_session_started', 'session_id', 'started_at'),
    )
