"""
Message CRUD.
"""
from typing import Any, Dict, List, Optional
import uuid
from sqlalchemy.orm import Session

from chatroom.model.message import Message
from chatroom.crud.base import CRUDBase


class CRUDMessage(CRUDBase[Message, Dict[str, Any], Dict[str, Any]]):
    def get_by_id(self, db: Session, *, message_id: uuid.UUID) -> Optional[Message]:
        return db.query(self.model).filter(self.model.id == message_id).first()

    def list_by_room(
        self,
        db: Session,
        *,
        room_id: uuid.UUID,
        after_seq: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Message]:
        """Messages in a room, oldest first. Optional after_seq/limit for cursor pagination."""
        base = db.query(self.model).filter(self.model.room_id == room_id)
        if after_seq is not None:
            base = base.filter(self.model.seq > after_seq)
        base = base.order_by(self.model.seq)
        if limit is not None:
            base = base.limit(limit)
        return base.all()

    def count_by_room(self, db: Session, *, room_id: uuid.UUID) -> int:
        return db.query(self.model).filter(self.model.room_id == room_id).count()

    def delete_by_id(self, db: Session, *, message_id: uuid.UUID) -> int:
        return (
            db.query(self.model)
            .filter(self.model.id == message_id)
            .delete(synchronize_session=False)
        )

    def delete_for_room(self, db: Session, *, room_id: uuid.UUID) -> int:
        return (
            db.query(self.model)
            .filter(self.model.room_id == room_id)
            .delete(synchronize_session=False)
        )


message_crud = CRUDMessage(Message)
