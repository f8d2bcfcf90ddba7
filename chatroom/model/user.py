"""
User model. A reference to an identity owned by the external auth system.
"""
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.sql import func
import uuid
from chatroom.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
