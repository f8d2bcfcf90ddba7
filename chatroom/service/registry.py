"""
Identity and room registry: users, rooms and who belongs where.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union
import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from chatroom.core.database import SessionLocal, transaction
from chatroom.core.config import settings
from chatroom.core.exceptions import ChatError, NotFound, TransactionConflict, ValidationError
from chatroom.core.ids import as_uuid
from chatroom.core.locks import RoomLockRegistry, room_locks
from chatroom.core.violations import ViolationKind
from chatroom.crud import room_crud, room_membership_crud, user_crud
from chatroom.schema.chat import MembershipRecord, RoomRecord, UserRecord
from chatroom.service.validation import validate_membership, validate_room

logger = logging.getLogger(__name__)


class SessionRegistryView:
    """RegistryView backed by an open session."""

    def __init__(self, db: Session):
        self.db = db

    def room_exists(self, room_id: uuid.UUID) -> bool:
        return room_crud.exists(self.db, room_id)

    def user_exists(self, user_id: uuid.UUID) -> bool:
        return user_crud.exists(self.db, user_id)

    def is_member(self, room_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return (
            room_membership_crud.get_by_room_and_user(
                self.db, room_id=room_id, user_id=user_id
            )
            is not None
        )


class RoomRegistry:
    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        locks: RoomLockRegistry = room_locks,
    ):
        self.session_factory = session_factory
        self.locks = locks

    # --- Users ---

    def register_user(
        self, user_id: Union[uuid.UUID, str, None] = None, name: Optional[str] = None
    ) -> Union[UserRecord, ValidationError]:
        """Record a reference to an externally managed user. Returns the existing record if already known."""
        if user_id is not None:
            user_id = as_uuid(user_id)
            if user_id is None:
                return ValidationError({ViolationKind.MISSING_USER})
        try:
            with transaction(self.session_factory) as db:
                user = user_crud.get(db, user_id) if user_id else None
                if user is None:
                    user = user_crud.create_from_dict(
                        db, obj_in={"id": user_id or uuid.uuid4(), "name": name}
                    )
                    logger.info("Registered user %s", user.id)
                return UserRecord.model_validate(user)
        except IntegrityError:
            if user_id is None:
                raise
            # registered concurrently by another caller
            return self.resolve_user(user_id)

    def resolve_user(self, user_id: Union[uuid.UUID, str]) -> Optional[UserRecord]:
        user_id = as_uuid(user_id)
        if user_id is None:
            return None
        with self.session_factory() as db:
            user = user_crud.get(db, user_id)
            return UserRecord.model_validate(user) if user else None

    # --- Rooms ---

    def create_room(
        self, name: str, member_ids: Iterable[Union[uuid.UUID, str]] = ()
    ) -> Union[RoomRecord, ValidationError]:
        """Create a room with its initial members."""
        member_ids = list(dict.fromkeys(as_uuid(user_id) for user_id in member_ids))
        try:
            with transaction(self.session_factory) as db:
                kinds = validate_room(SessionRegistryView(db), name, member_ids)
                if kinds:
                    raise ValidationError(kinds)
                now = datetime.now(timezone.utc)
                room = room_crud.create_from_dict(
                    db,
                    obj_in={"id": uuid.uuid4(), "name": name, "message_seq": 0, "created_at": now},
                )
                for user_id in member_ids:
                    room_membership_crud.create_from_dict(
                        db,
                        obj_in={"room_id": room.id, "user_id": user_id, "joined_at": now},
                    )
                logger.info("Created room %s with %d member(s)", room.id, len(member_ids))
                return RoomRecord.model_validate(room)
        except ChatError as e:
            return e
        except IntegrityError:
            # a member was unregistered between validation and commit
            with self.session_factory() as db:
                kinds = validate_room(SessionRegistryView(db), name, member_ids)
            if not kinds:
                raise
            return ValidationError(kinds)

    def resolve_room(self, room_id: Union[uuid.UUID, str]) -> Optional[RoomRecord]:
        room_id = as_uuid(room_id)
        if room_id is None:
            return None
        with self.session_factory() as db:
            room = room_crud.get_by_id(db, room_id=room_id)
            return RoomRecord.model_validate(room) if room else None

    def list_rooms_for_user(self, user_id: Union[uuid.UUID, str]) -> List[RoomRecord]:
        user_id = as_uuid(user_id)
        if user_id is None:
            return []
        with self.session_factory() as db:
            rooms = room_crud.list_rooms_for_user(db, user_id=user_id)
            return [RoomRecord.model_validate(r) for r in rooms]

    # --- Membership ---

    def add_member(
        self, room_id: Union[uuid.UUID, str], user_id: Union[uuid.UUID, str]
    ) -> Union[MembershipRecord, NotFound, TransactionConflict]:
        room_id, user_id = as_uuid(room_id), as_uuid(user_id)
        if room_id is None:
            return NotFound("Room")
        try:
            with self.locks.hold(room_id, timeout=settings.LOCK_TIMEOUT_SECONDS), transaction(
                self.session_factory
            ) as db:
                kinds = validate_membership(SessionRegistryView(db), room_id, user_id)
                if kinds:
                    raise NotFound(_missing_entity(kinds))
                membership = room_membership_crud.get_by_room_and_user(
                    db, room_id=room_id, user_id=user_id
                )
                if membership is None:
                    membership = room_membership_crud.create_from_dict(
                        db,
                        obj_in={
                            "room_id": room_id,
                            "user_id": user_id,
                            "joined_at": datetime.now(timezone.utc),
                        },
                    )
                    logger.info("User %s joined room %s", user_id, room_id)
                return MembershipRecord.model_validate(membership)
        except ChatError as e:
            return e
        except IntegrityError:
            existing = self._membership(room_id, user_id)
            if existing is not None:
                return existing
            return NotFound("Room")

    def remove_member(
        self, room_id: Union[uuid.UUID, str], user_id: Union[uuid.UUID, str]
    ) -> Union[bool, NotFound]:
        room_id, user_id = as_uuid(room_id), as_uuid(user_id)
        if room_id is None or user_id is None:
            return NotFound("Membership")
        try:
            with transaction(self.session_factory) as db:
                membership = room_membership_crud.get_by_room_and_user(
                    db, room_id=room_id, user_id=user_id
                )
                if membership is None:
                    raise NotFound("Membership")
                db.delete(membership)
                logger.info("User %s left room %s", user_id, room_id)
                return True
        except ChatError as e:
            return e

    def list_members(self, room_id: Union[uuid.UUID, str]) -> List[uuid.UUID]:
        room_id = as_uuid(room_id)
        if room_id is None:
            return []
        with self.session_factory() as db:
            return [m.user_id for m in room_membership_crud.list_by_room(db, room_id=room_id)]

    def _membership(self, room_id: uuid.UUID, user_id: uuid.UUID) -> Optional[MembershipRecord]:
        with self.session_factory() as db:
            membership = room_membership_crud.get_by_room_and_user(
                db, room_id=room_id, user_id=user_id
            )
            return MembershipRecord.model_validate(membership) if membership else None


def _missing_entity(kinds) -> str:
    if ViolationKind.MISSING_ROOM in kinds:
        return "Room"
    return "User"
