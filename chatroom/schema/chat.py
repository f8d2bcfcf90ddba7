"""
Chat records: users, rooms, memberships and messages as handed to callers.
"""
from datetime import datetime, timezone
from typing import Optional
import uuid
from pydantic import BaseModel, Field, field_validator


class Record(BaseModel):
    """Base for records read from ORM rows. Naive timestamps (SQLite) are read as UTC."""

    class Config:
        from_attributes = True

    @field_validator("*", mode="after")
    @classmethod
    def _as_utc(cls, value):
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class UserRecord(Record):
    id: uuid.UUID
    name: Optional[str] = None


# --- Room ---


class RoomRecord(Record):
    """Single room."""
    id: uuid.UUID
    name: str
    last_message_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class MembershipRecord(Record):
    id: uuid.UUID
    room_id: uuid.UUID
    user_id: uuid.UUID
    joined_at: Optional[datetime] = None


class DeletionResult(BaseModel):
    """Outcome of a room cascade delete."""
    room_id: uuid.UUID
    deleted_message_count: int = Field(..., ge=0, description="Messages removed with the room.")
    removed_member_count: int = Field(0, ge=0, description="Memberships removed with the room.")


# --- Message ---


class MessageRecord(Record):
    """Single message."""
    id: uuid.UUID
    room_id: uuid.UUID
    user_id: uuid.UUID
    content: Optional[str] = None
    image_ref: Optional[str] = None
    seq: int
    created_at: Optional[datetime] = None
