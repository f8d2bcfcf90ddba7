"""
Per-room locks shared by every service in the process.
"""
from contextlib import contextmanager
from typing import Dict, Iterator, Optional
import logging
import threading
import uuid

from chatroom.core.exceptions import TransactionConflict

logger = logging.getLogger(__name__)


class _RoomLock:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        # threads holding or waiting for the lock
        self.holders = 0


class RoomLockRegistry:
    """Hands out one re-entrant lock per room id. Entries are dropped once nobody holds or waits."""

    def __init__(self) -> None:
        # room_id -> lock entry
        self._rooms: Dict[uuid.UUID, _RoomLock] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, room_id: uuid.UUID, timeout: Optional[float] = None) -> Iterator[None]:
        """Hold the room's lock for the block. Raises TransactionConflict if not acquired within timeout."""
        with self._guard:
            entry = self._rooms.get(room_id)
            if entry is None:
                entry = self._rooms[room_id] = _RoomLock()
            entry.holders += 1
        try:
            acquired = entry.lock.acquire(timeout=-1 if timeout is None else timeout)
            if not acquired:
                logger.warning("Timed out after %ss waiting for room lock %s", timeout, room_id)
                raise TransactionConflict()
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0 and self._rooms.get(room_id) is entry:
                    del self._rooms[room_id]

    def active_rooms(self) -> int:
        """Number of rooms with a holder or waiter."""
        with self._guard:
            return len(self._rooms)


room_locks = RoomLockRegistry()
