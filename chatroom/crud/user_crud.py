"""
User CRUD operations.
"""
from chatroom.model.user import User
from chatroom.crud.base import CRUDBase


class CRUDUser(CRUDBase[User, dict, dict]):
    """User-specific CRUD operations."""


user_crud = CRUDUser(User)
