from concurrent.futures import ThreadPoolExecutor
import threading

from chatroom.core.exceptions import ValidationError
from chatroom.core.violations import ViolationKind
from chatroom.schema.chat import MessageRecord


def test_concurrent_appends_are_all_kept(store, room, user):
    n = 20
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(
            pool.map(lambda i: store.append(room.id, user.id, content=f"msg-{i}"), range(n))
        )

    assert all(isinstance(r, MessageRecord) for r in results)
    messages = store.list_by_room(room.id)
    assert len(messages) == n
    assert len({m.id for m in messages}) == n
    assert sorted(m.content for m in messages) == sorted(f"msg-{i}" for i in range(n))
    assert [m.seq for m in messages] == list(range(1, n + 1))


def test_concurrent_appends_to_different_rooms(registry, store, user):
    rooms = [registry.create_room(f"room-{i}", member_ids=[user.id]) for i in range(4)]
    jobs = [(r.id, j) for r in rooms for j in range(5)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda job: store.append(job[0], user.id, content=str(job[1])), jobs))

    assert all(isinstance(r, MessageRecord) for r in results)
    for r in rooms:
        assert store.count_by_room(r.id) == 5


def test_no_append_survives_a_concurrent_delete(store, lifecycle, registry, room, user):
    for i in range(3):
        store.append(room.id, user.id, content=f"before-{i}")
    start = threading.Barrier(9)

    def append(i):
        start.wait()
        return store.append(room.id, user.id, content=f"racing-{i}")

    def delete():
        start.wait()
        return lifecycle.delete_room(room.id, user.id)

    with ThreadPoolExecutor(max_workers=9) as pool:
        append_futures = [pool.submit(append, i) for i in range(8)]
        delete_future = pool.submit(delete)
        appended = [f.result() for f in append_futures]
        deletion = delete_future.result()

    accepted = [r for r in appended if isinstance(r, MessageRecord)]
    rejected = [r for r in appended if isinstance(r, ValidationError)]
    assert len(accepted) + len(rejected) == 8
    assert all(r.kinds == {ViolationKind.MISSING_ROOM} for r in rejected)
    # every accepted append landed before the deletion and was removed with the room
    assert deletion.deleted_message_count == 3 + len(accepted)
    assert store.list_by_room(room.id) == []
    assert registry.resolve_room(room.id) is None


def test_readers_never_see_a_partly_deleted_room(registry, store, lifecycle, room, user):
    n = 30
    for i in range(n):
        store.append(room.id, user.id, content=f"msg-{i}")
    done = threading.Event()
    start = threading.Barrier(5)

    def read():
        seen = []
        start.wait()
        while True:
            finished = done.is_set()
            count = len(store.list_by_room(room.id))
            present = registry.resolve_room(room.id) is not None
            seen.append((count, present))
            if finished:
                return seen

    def delete():
        start.wait()
        try:
            return lifecycle.delete_room(room.id, user.id)
        finally:
            done.set()

    with ThreadPoolExecutor(max_workers=5) as pool:
        readers = [pool.submit(read) for _ in range(4)]
        deletion = pool.submit(delete).result()
        observations = [obs for r in readers for obs in r.result()]

    assert deletion.deleted_message_count == n
    assert all(count in (0, n) for count, _ in observations)
    # once the messages are gone the room is gone too
    assert all(not present for count, present in observations if count == 0)
    # the last read of every reader happens after the commit
    assert observations[-1] == (0, False)
