"""
Message store: append, list and delete messages of a room.

Appends and room-wide deletes hold the room lock for their whole transaction,
so an append never lands in a room that is being deleted. Reads take no lock
and only ever see committed rows.
"""
from datetime import datetime, timezone
from typing import List, Optional, Union
import logging
import uuid

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from chatroom.core.config import settings
from chatroom.core.database import SessionLocal, transaction
from chatroom.core.exceptions import (
    ChatError,
    Forbidden,
    NotFound,
    TransactionConflict,
    ValidationError,
)
from chatroom.core.ids import as_uuid
from chatroom.core.locks import RoomLockRegistry, room_locks
from chatroom.core.violations import ViolationKind
from chatroom.crud import message_crud, room_crud
from chatroom.schema.chat import MessageRecord
from chatroom.service.registry import SessionRegistryView
from chatroom.service.validation import validate_message

logger = logging.getLogger(__name__)


class MessageStore:
    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        locks: RoomLockRegistry = room_locks,
    ):
        self.session_factory = session_factory
        self.locks = locks

    def append(
        self,
        room_id: Union[uuid.UUID, str],
        user_id: Union[uuid.UUID, str],
        content: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Union[MessageRecord, ValidationError, TransactionConflict]:
        """Post a message. Every call creates a new message; nothing is written when validation fails."""
        room_id, user_id = as_uuid(room_id), as_uuid(user_id)
        if room_id is None:
            with self.session_factory() as db:
                kinds = validate_message(SessionRegistryView(db), room_id, user_id, content, image)
            logger.info("Message rejected for unknown room id")
            return ValidationError(kinds)
        try:
            with self.locks.hold(room_id, timeout=settings.LOCK_TIMEOUT_SECONDS), transaction(
                self.session_factory
            ) as db:
                kinds = validate_message(SessionRegistryView(db), room_id, user_id, content, image)
                if kinds:
                    raise ValidationError(kinds)
                now = datetime.now(timezone.utc)
                seq = room_crud.next_message_seq(db, room_id=room_id, now=now)
                if seq is None:
                    # deleted by another process after validation
                    raise ValidationError({ViolationKind.MISSING_ROOM})
                msg = message_crud.create_from_dict(
                    db,
                    obj_in={
                        "id": uuid.uuid4(),
                        "room_id": room_id,
                        "user_id": user_id,
                        "content": content,
                        "image_ref": image or None,
                        "seq": seq,
                        "created_at": now,
                    },
                )
                record = MessageRecord.model_validate(msg)
        except ChatError as e:
            logger.info("Message rejected for room %s: %s", room_id, e.message)
            return e
        except IntegrityError:
            # room or user removed by another process between validation and commit
            with self.session_factory() as db:
                kinds = validate_message(SessionRegistryView(db), room_id, user_id, content, image)
            if not kinds:
                raise
            return ValidationError(kinds)
        except OperationalError as e:
            logger.warning("Append to room %s hit a lock conflict: %s", room_id, e)
            return TransactionConflict()
        logger.debug("Message %s appended to room %s (seq %d)", record.id, room_id, record.seq)
        return record

    def list_by_room(
        self,
        room_id: Union[uuid.UUID, str],
        *,
        after_seq: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[MessageRecord]:
        """Messages of a room in creation order. Empty when the room has none or does not exist."""
        room_id = as_uuid(room_id)
        if room_id is None:
            return []
        with self.session_factory() as db:
            items = message_crud.list_by_room(db, room_id=room_id, after_seq=after_seq, limit=limit)
            return [MessageRecord.model_validate(m) for m in items]

    def count_by_room(self, room_id: Union[uuid.UUID, str]) -> int:
        room_id = as_uuid(room_id)
        if room_id is None:
            return 0
        with self.session_factory() as db:
            return message_crud.count_by_room(db, room_id=room_id)

    def get_message(self, message_id: Union[uuid.UUID, str]) -> Optional[MessageRecord]:
        message_id = as_uuid(message_id)
        if message_id is None:
            return None
        with self.session_factory() as db:
            msg = message_crud.get_by_id(db, message_id=message_id)
            return MessageRecord.model_validate(msg) if msg else None

    def delete_message(
        self, message_id: Union[uuid.UUID, str], requesting_user_id: Union[uuid.UUID, str]
    ) -> Union[bool, NotFound, Forbidden, TransactionConflict]:
        """Delete one message. Only its author may do so."""
        message_id, requesting_user_id = as_uuid(message_id), as_uuid(requesting_user_id)
        msg = self.get_message(message_id)
        if msg is None:
            return NotFound("Message")
        try:
            with self.locks.hold(msg.room_id, timeout=settings.LOCK_TIMEOUT_SECONDS), transaction(
                self.session_factory
            ) as db:
                current = message_crud.get_by_id(db, message_id=message_id)
                if current is None:
                    raise NotFound("Message")
                if current.user_id != requesting_user_id:
                    raise Forbidden("Only the author can delete this message.")
                message_crud.delete_by_id(db, message_id=message_id)
        except ChatError as e:
            return e
        except OperationalError as e:
            logger.warning("Delete of message %s hit a lock conflict: %s", message_id, e)
            return TransactionConflict()
        logger.info("Message %s deleted from room %s", message_id, msg.room_id)
        return True

    def delete_all_for_room(
        self, room_id: Union[uuid.UUID, str], db: Optional[Session] = None
    ) -> Union[int, TransactionConflict]:
        """Remove every message of a room and return how many were removed.

        With db the delete joins the caller's transaction; the caller must already hold the room lock.
        """
        room_id = as_uuid(room_id)
        if room_id is None:
            return 0
        if db is not None:
            return message_crud.delete_for_room(db, room_id=room_id)
        try:
            with self.locks.hold(room_id, timeout=settings.LOCK_TIMEOUT_SECONDS), transaction(
                self.session_factory
            ) as own_db:
                deleted = message_crud.delete_for_room(own_db, room_id=room_id)
        except ChatError as e:
            return e
        except OperationalError as e:
            logger.warning("Bulk delete for room %s hit a lock conflict: %s", room_id, e)
            return TransactionConflict()
        logger.info("Deleted %d message(s) from room %s", deleted, room_id)
        return deleted
