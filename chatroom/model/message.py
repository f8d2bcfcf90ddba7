"""
Message model. One immutable post in a room: text, an image reference, or both.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.sql import func
import uuid
from chatroom.core.database import Base


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (UniqueConstraint("room_id", "seq", name="uq_messages_room_seq"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    room_id = Column(Uuid, ForeignKey("rooms.id"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=True)
    image_ref = Column(String, nullable=True)  # opaque handle from the upload layer
    seq = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())