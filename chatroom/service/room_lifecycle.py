"""
Room lifecycle: closing a room together with everything it owns.
"""
from typing import Optional, Union
import logging
import uuid

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from chatroom.core.config import settings
from chatroom.core.database import SessionLocal, transaction
from chatroom.core.exceptions import ChatError, Forbidden, NotFound, TransactionConflict
from chatroom.core.ids import as_uuid
from chatroom.core.locks import RoomLockRegistry, room_locks
from chatroom.core.violations import ViolationKind
from chatroom.crud import room_crud, room_membership_crud
from chatroom.schema.chat import DeletionResult
from chatroom.service.message_store import MessageStore
from chatroom.service.registry import SessionRegistryView
from chatroom.service.validation import validate_room_deletion

logger = logging.getLogger(__name__)


class RoomLifecycleManager:
    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        locks: RoomLockRegistry = room_locks,
        message_store: Optional[MessageStore] = None,
    ):
        self.session_factory = session_factory
        self.locks = locks
        self.message_store = message_store or MessageStore(session_factory, locks)

    def delete_room(
        self, room_id: Union[uuid.UUID, str], requesting_user_id: Union[uuid.UUID, str]
    ) -> Union[DeletionResult, NotFound, Forbidden, TransactionConflict]:
        """Delete a room with its messages and memberships in one transaction.

        Readers see either the whole room or none of it. Appends to the room
        wait on the room lock and then find the room gone.
        """
        room_id, requesting_user_id = as_uuid(room_id), as_uuid(requesting_user_id)
        if room_id is None:
            return NotFound("Room")
        try:
            with self.locks.hold(room_id, timeout=settings.LOCK_TIMEOUT_SECONDS), transaction(
                self.session_factory
            ) as db:
                room = room_crud.get_for_update(db, room_id=room_id)
                kinds = validate_room_deletion(SessionRegistryView(db), room_id, requesting_user_id)
                if room is None or ViolationKind.MISSING_ROOM in kinds:
                    raise NotFound("Room")
                if ViolationKind.NOT_MEMBER in kinds:
                    raise Forbidden("Only room members can delete the room.")
                deleted_messages = self.message_store.delete_all_for_room(room_id, db=db)
                removed_members = room_membership_crud.delete_for_room(db, room_id=room_id)
                room_crud.delete_by_id(db, room_id=room_id)
        except ChatError as e:
            logger.info("Room %s not deleted: %s", room_id, e.message)
            return e
        except OperationalError as e:
            # lock wait, deadlock or serialization failure reported by the database; rolled back
            logger.warning("Deleting room %s hit a lock conflict: %s", room_id, e)
            return TransactionConflict()
        logger.info(
            "Room %s deleted by %s: %d message(s), %d membership(s)",
            room_id,
            requesting_user_id,
            deleted_messages,
            removed_members,
        )
        return DeletionResult(
            room_id=room_id,
            deleted_message_count=deleted_messages,
            removed_member_count=removed_members,
        )
