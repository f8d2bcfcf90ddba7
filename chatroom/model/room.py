"""
Room model. Owns its messages and memberships; both are removed only by explicit room deletion.
"""
from sqlalchemy import Column, Integer, String, DateTime, Uuid
from sqlalchemy.sql import func
import uuid
from chatroom.core.database import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    message_seq = Column(Integer, nullable=False, default=0)  # last sequence number handed to a message
    last_message_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())