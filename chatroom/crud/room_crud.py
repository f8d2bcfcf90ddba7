"""
Room CRUD.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import uuid
from sqlalchemy.orm import Session
from sqlalchemy import desc

from chatroom.model.room import Room
from chatroom.model.room_membership import RoomMembership
from chatroom.crud.base import CRUDBase


class CRUDRoom(CRUDBase[Room, Dict[str, Any], Dict[str, Any]]):
    def get_by_id(self, db: Session, *, room_id: uuid.UUID) -> Optional[Room]:
        return db.query(self.model).filter(self.model.id == room_id).first()

    def get_for_update(self, db: Session, *, room_id: uuid.UUID) -> Optional[Room]:
        """Fetch the room row locked for the rest of the transaction (no-op lock on SQLite)."""
        return (
            db.query(self.model)
            .filter(self.model.id == room_id)
            .with_for_update()
            .first()
        )

    def next_message_seq(
        self, db: Session, *, room_id: uuid.UUID, now: datetime
    ) -> Optional[int]:
        """Bump the room's message counter and return the new value, or None if the room is gone.

        The UPDATE takes the row's write lock, which serializes appends against deletion across processes.
        """
        updated = (
            db.query(self.model)
            .filter(self.model.id == room_id)
            .update(
                {
                    self.model.message_seq: self.model.message_seq + 1,
                    self.model.last_message_at: now,
                },
                synchronize_session=False,
            )
        )
        if not updated:
            return None
        return (
            db.query(self.model.message_seq)
            .filter(self.model.id == room_id)
            .scalar()
        )

    def list_rooms_for_user(self, db: Session, *, user_id: uuid.UUID) -> List[Room]:
        """Rooms the user is a member of, newest first."""
        subq = (
            db.query(RoomMembership.room_id)
            .filter(RoomMembership.user_id == user_id)
        )
        return (
            db.query(self.model)
            .filter(self.model.id.in_(subq))
            .order_by(desc(self.model.created_at), desc(self.model.id))
            .all()
        )

    def delete_by_id(self, db: Session, *, room_id: uuid.UUID) -> int:
        return (
            db.query(self.model)
            .filter(self.model.id == room_id)
            .delete(synchronize_session=False)
        )


room_crud = CRUDRoom(Room)
