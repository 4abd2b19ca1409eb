from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Index
import uuid
from vegmap.database.connection import Base


class SearchQuery(Base):
    __tablename__ = "search_queries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    session_id = Column(String(64), nullable=False, index=True)
    query_text = Column(String(500), nullable=False)
    filter_category = Column(String(32), nullable=True)
    results_count = Column(Integer, nullable=False, default=0)
    searched_at = Column(DateTime(timezone=True), nullable=False, index=True)

    __table_args__ = (
        Index('ix_search_queries_user_searched', 'user_id', 'searched_at'),
    )
