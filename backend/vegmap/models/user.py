from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
import uuid
from vegmap.database.connection import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # subject claim issued by the hosted identity provider
    auth_provider_id = Column(String(255), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default="user")  # user, admin
    created_at = Column(DateTime(timezone=True), server_default=func.now())
