from chatroom.model.user import User
from chatroom.model.room import Room
from chatroom.model.room_membership import RoomMembership
from chatroom.model.message import Message

__all__ = ["User", "Room", "RoomMembership", "Message"]
