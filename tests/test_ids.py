import uuid

from chatroom.core.ids import as_uuid


def test_as_uuid_accepts_uuids_and_their_strings():
    value = uuid.uuid4()
    assert as_uuid(value) is value
    assert as_uuid(str(value)) == value
    assert as_uuid(value.hex) == value
    assert as_uuid(str(value).upper()) == value


def test_as_uuid_rejects_everything_else():
    assert as_uuid(None) is None
    assert as_uuid("") is None
    assert as_uuid("not-a-uuid") is None
    assert as_uuid(42) is None
