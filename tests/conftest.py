import uuid

import pytest

from chatroom.core.database import Base, create_db_engine, make_session_factory
from chatroom.core.locks import RoomLockRegistry
import chatroom.model  # noqa: F401  register tables
from chatroom.service.message_store import MessageStore
from chatroom.service.registry import RoomRegistry
from chatroom.service.room_lifecycle import RoomLifecycleManager


@pytest.fixture()
def engine(tmp_path):
    """File-backed SQLite so worker threads get their own connections."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'chat.db'}", echo=False)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def locks():
    return RoomLockRegistry()


@pytest.fixture()
def registry(session_factory, locks):
    return RoomRegistry(session_factory, locks)


@pytest.fixture()
def store(session_factory, locks):
    return MessageStore(session_factory, locks)


@pytest.fixture()
def lifecycle(session_factory, locks, store):
    return RoomLifecycleManager(session_factory, locks, message_store=store)


@pytest.fixture()
def user(registry):
    return registry.register_user(name="alice")


@pytest.fixture()
def other_user(registry):
    return registry.register_user(name="bob")


@pytest.fixture()
def room(registry, user):
    """A room with `user` as its only member."""
    return registry.create_room("general", member_ids=[user.id])


@pytest.fixture()
def missing_id():
    return uuid.uuid4()
