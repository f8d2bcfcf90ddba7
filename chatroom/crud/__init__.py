from chatroom.crud.user_crud import user_crud
from chatroom.crud.room_crud import room_crud
from chatroom.crud.room_membership_crud import room_membership_crud
from chatroom.crud.message_crud import message_crud

__all__ = [
    "user_crud",
    "room_crud",
    "room_membership_crud",
    "message_crud",
]
