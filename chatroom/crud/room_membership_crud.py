"""
Room membership CRUD.
"""
from typing import Any, Dict, List, Optional
import uuid
from sqlalchemy.orm import Session

from chatroom.model.room_membership import RoomMembership
from chatroom.crud.base import CRUDBase


class CRUDRoomMembership(CRUDBase[RoomMembership, Dict[str, Any], Dict[str, Any]]):
    def get_by_room_and_user(
        self, db: Session, *, room_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[RoomMembership]:
        return (
            db.query(self.model)
            .filter(
                self.model.room_id == room_id,
                self.model.user_id == user_id,
            )
            .first()
        )

    def list_by_room(self, db: Session, *, room_id: uuid.UUID) -> List[RoomMembership]:
        return (
            db.query(self.model)
            .filter(self.model.room_id == room_id)
            .order_by(self.model.joined_at, self.model.id)
            .all()
        )

    def delete_for_room(self, db: Session, *, room_id: uuid.UUID) -> int:
        return (
            db.query(self.model)
            .filter(self.model.room_id == room_id)
            .delete(synchronize_session=False)
        )


room_membership_crud = CRUDRoomMembership(RoomMembership)
