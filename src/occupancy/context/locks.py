from __future__ import annotations

import threading

from contextlib import ExitStack, contextmanager


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from collections.abc import Iterator


class PropertyLocks:
    """ Hands out one lock per property id.

    Claiming a range is a read followed by a write, so two threads
    claiming overlapping ranges on the same property have to take turns.
    Threads working on different properties don't wait for each other.

    A lock only exists while some thread holds or waits for it, so the
    number of locks is bounded by the number of busy threads, not by the
    number of properties ever seen.

    The locks only guard the current process. Across processes the
    database has to serialize, see
    :class:`~occupancy.context.session.SessionProvider`.

    """

    def __init__(self) -> None:
        self.thread_lock = threading.Lock()
        self.locks: dict[str, threading.RLock] = {}
        self.users: dict[str, int] = {}

    @contextmanager
    def lock(self, property_id: str) -> Iterator[None]:
        with self.thread_lock:
            if property_id not in self.locks:
                self.locks[property_id] = threading.RLock()
                self.users[property_id] = 0

            self.users[property_id] += 1
            lock = self.locks[property_id]

        try:
            with lock:
                yield
        finally:
            with self.thread_lock:
                self.users[property_id] -= 1

                if not self.users[property_id]:
                    del self.users[property_id]
                    del self.locks[property_id]

    @contextmanager
    def hold(self, *property_ids: str) -> Iterator[None]:
        """ Holds the locks of all given properties. They are acquired
        in sorted order, so two units locking the same properties can't
        deadlock.

        """
        with ExitStack() as stack:
            for property_id in sorted(set(property_ids)):
                stack.enter_context(self.lock(property_id))

            yield
