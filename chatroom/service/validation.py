"""
Validation rules for messages, rooms, memberships and room deletion.

Every rule is a pure function over a read-only RegistryView and returns the
full set of violations found, so a single call can report a missing room and
empty content together. Nothing here writes or raises.
"""
from typing import FrozenSet, Iterable, List, Optional, Protocol
import uuid

from chatroom.core.violations import ViolationKind

VIOLATION_MESSAGES = {
    ViolationKind.MISSING_ROOM: "Room must exist",
    ViolationKind.MISSING_USER: "User must exist",
    ViolationKind.EMPTY_CONTENT: "Content can't be blank",
    ViolationKind.BLANK_NAME: "Name can't be blank",
    ViolationKind.NOT_MEMBER: "User is not a member of this room",
}


class RegistryView(Protocol):
    """Read-only lookups the rules need."""

    def room_exists(self, room_id: uuid.UUID) -> bool: ...

    def user_exists(self, user_id: uuid.UUID) -> bool: ...

    def is_member(self, room_id: uuid.UUID, user_id: uuid.UUID) -> bool: ...


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_message(
    view: RegistryView,
    room_id: Optional[uuid.UUID],
    user_id: Optional[uuid.UUID],
    content: Optional[str],
    image: Optional[str],
) -> FrozenSet[ViolationKind]:
    """A message needs an existing room, an existing user, and text or an image (or both)."""
    kinds = set()
    if room_id is None or not view.room_exists(room_id):
        kinds.add(ViolationKind.MISSING_ROOM)
    if user_id is None or not view.user_exists(user_id):
        kinds.add(ViolationKind.MISSING_USER)
    if is_blank(content) and not image:
        kinds.add(ViolationKind.EMPTY_CONTENT)
    return frozenset(kinds)


def validate_room(
    view: RegistryView, name: Optional[str], member_ids: Iterable[Optional[uuid.UUID]] = ()
) -> FrozenSet[ViolationKind]:
    kinds = set()
    if is_blank(name):
        kinds.add(ViolationKind.BLANK_NAME)
    if any(user_id is None or not view.user_exists(user_id) for user_id in member_ids):
        kinds.add(ViolationKind.MISSING_USER)
    return frozenset(kinds)


def validate_membership(
    view: RegistryView, room_id: Optional[uuid.UUID], user_id: Optional[uuid.UUID]
) -> FrozenSet[ViolationKind]:
    kinds = set()
    if room_id is None or not view.room_exists(room_id):
        kinds.add(ViolationKind.MISSING_ROOM)
    if user_id is None or not view.user_exists(user_id):
        kinds.add(ViolationKind.MISSING_USER)
    return frozenset(kinds)


def validate_room_deletion(
    view: RegistryView, room_id: Optional[uuid.UUID], requesting_user_id: Optional[uuid.UUID]
) -> FrozenSet[ViolationKind]:
    # membership is meaningless for a room that does not exist
    if room_id is None or not view.room_exists(room_id):
        return frozenset({ViolationKind.MISSING_ROOM})
    if requesting_user_id is None or not view.is_member(room_id, requesting_user_id):
        return frozenset({ViolationKind.NOT_MEMBER})
    return frozenset()


def full_messages(kinds: Iterable[ViolationKind]) -> List[str]:
    """Human-facing text for each violation, sorted."""
    return sorted(VIOLATION_MESSAGES[kind] for kind in kinds)
