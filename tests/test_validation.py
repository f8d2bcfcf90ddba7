import uuid

from chatroom.core.violations import ViolationKind
from chatroom.service.validation import (
    full_messages,
    validate_membership,
    validate_message,
    validate_room,
    validate_room_deletion,
)


class FakeView:
    def __init__(self, rooms=(), users=(), members=()):
        self.rooms = set(rooms)
        self.users = set(users)
        self.members = set(members)

    def room_exists(self, room_id):
        return room_id in self.rooms

    def user_exists(self, user_id):
        return user_id in self.users

    def is_member(self, room_id, user_id):
        return (room_id, user_id) in self.members


ROOM = uuid.uuid4()
USER = uuid.uuid4()
VIEW = FakeView(rooms=[ROOM], users=[USER], members=[(ROOM, USER)])


def test_message_with_content_and_image_is_valid():
    assert validate_message(VIEW, ROOM, USER, "hello", "img/1.png") == frozenset()


def test_message_with_only_content_is_valid():
    assert validate_message(VIEW, ROOM, USER, "hello", None) == frozenset()


def test_message_with_only_image_is_valid():
    assert validate_message(VIEW, ROOM, USER, None, "img/1.png") == frozenset()


def test_message_without_content_or_image_is_invalid():
    assert validate_message(VIEW, ROOM, USER, None, None) == {ViolationKind.EMPTY_CONTENT}


def test_blank_content_and_empty_image_count_as_absent():
    assert validate_message(VIEW, ROOM, USER, "   \n", "") == {ViolationKind.EMPTY_CONTENT}


def test_missing_room_is_reported():
    assert validate_message(VIEW, uuid.uuid4(), USER, "hi", None) == {ViolationKind.MISSING_ROOM}
    assert validate_message(VIEW, None, USER, "hi", None) == {ViolationKind.MISSING_ROOM}


def test_missing_user_is_reported():
    assert validate_message(VIEW, ROOM, uuid.uuid4(), "hi", None) == {ViolationKind.MISSING_USER}


def test_all_violations_are_collected():
    kinds = validate_message(VIEW, uuid.uuid4(), None, None, None)
    assert kinds == {
        ViolationKind.MISSING_ROOM,
        ViolationKind.MISSING_USER,
        ViolationKind.EMPTY_CONTENT,
    }


def test_room_needs_a_name_and_known_members():
    assert validate_room(VIEW, "general", [USER]) == frozenset()
    assert validate_room(VIEW, "  ", [USER]) == {ViolationKind.BLANK_NAME}
    assert validate_room(VIEW, None, [uuid.uuid4()]) == {
        ViolationKind.BLANK_NAME,
        ViolationKind.MISSING_USER,
    }


def test_membership_needs_room_and_user():
    assert validate_membership(VIEW, ROOM, USER) == frozenset()
    assert validate_membership(VIEW, uuid.uuid4(), uuid.uuid4()) == {
        ViolationKind.MISSING_ROOM,
        ViolationKind.MISSING_USER,
    }


def test_room_deletion_requires_existing_room_then_membership():
    stranger = uuid.uuid4()
    assert validate_room_deletion(VIEW, ROOM, USER) == frozenset()
    assert validate_room_deletion(VIEW, ROOM, stranger) == {ViolationKind.NOT_MEMBER}
    assert validate_room_deletion(VIEW, uuid.uuid4(), stranger) == {ViolationKind.MISSING_ROOM}


def test_full_messages():
    assert full_messages({ViolationKind.EMPTY_CONTENT}) == ["Content can't be blank"]
    assert full_messages({ViolationKind.MISSING_ROOM, ViolationKind.MISSING_USER}) == [
        "Room must exist",
        "User must exist",
    ]


class StrictView(FakeView):
    """Fails on a None id so the rules must handle it before looking anything up."""

    def room_exists(self, room_id):
        assert room_id is not None
        return super().room_exists(room_id)

    def user_exists(self, user_id):
        assert user_id is not None
        return super().user_exists(user_id)

    def is_member(self, room_id, user_id):
        assert room_id is not None and user_id is not None
        return super().is_member(room_id, user_id)


def test_unparsable_ids_count_as_missing():
    view = StrictView(rooms=[ROOM], users=[USER], members=[(ROOM, USER)])
    assert validate_message(view, None, None, "hi", None) == {
        ViolationKind.MISSING_ROOM,
        ViolationKind.MISSING_USER,
    }
    assert validate_room(view, "general", [USER, None]) == {ViolationKind.MISSING_USER}
    assert validate_membership(view, None, None) == {
        ViolationKind.MISSING_ROOM,
        ViolationKind.MISSING_USER,
    }
    assert validate_room_deletion(view, None, USER) == {ViolationKind.MISSING_ROOM}
    assert validate_room_deletion(view, ROOM, None) == {ViolationKind.NOT_MEMBER}
