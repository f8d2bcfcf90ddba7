"""
Violation kinds reported by validation, one per broken invariant.
"""
from enum import Enum


class ViolationKind(str, Enum):
    MISSING_ROOM = "missing_room"
    MISSING_USER = "missing_user"
    EMPTY_CONTENT = "empty_content"
    BLANK_NAME = "blank_name"
    NOT_MEMBER = "not_member"
