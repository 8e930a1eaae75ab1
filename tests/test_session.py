from __future__ import annotations

import pytest

from datetime import date
from occupancy import new_booking_service, registry
from occupancy.context.session import SessionProvider
from occupancy.db.models import Booking
from occupancy.modules import errors
from sqlalchemy import text
from threading import Barrier, Thread
from uuid import uuid4 as new_uuid


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path
    from sqlalchemy.orm import Session
    from occupancy.context.core import Context


class SessionThread(Thread):
    def __init__(self, context: Context) -> None:
        Thread.__init__(self)
        self.session: Session | None = None
        self.context = context

    def run(self) -> None:
        bookings = new_booking_service(self.context)
        self.session = bookings.session
        bookings.close()


class ExceptionThread(Thread):
    def __init__(self, call: Callable[[], object], barrier: Barrier) -> None:
        Thread.__init__(self)
        self.call = call
        self.barrier = barrier
        self.exception: Exception | None = None

    def run(self) -> None:
        self.barrier.wait(5)

        try:
            self.call()
        except Exception as e:
            self.exception = e


def book_concurrently(
    contexts: list[Context],
    property_ids: list[str] | None = None
) -> list[Exception | None]:

    barrier = Barrier(len(contexts))
    property_ids = property_ids or ['chalet'] * len(contexts)

    def book(context: Context, property_id: str) -> Callable[[], object]:
        return lambda: new_booking_service(context).create(
            property_id, 'Ada', 'ada@example.org',
            date(2024, 8, 1), date(2024, 8, 5)
        )

    threads = [
        ExceptionThread(book(c, p), barrier)
        for c, p in zip(contexts, property_ids)
    ]

    for thread in threads:
        thread.start()

    for thread in threads:
        thread.join()

    return [thread.exception for thread in threads]


def test_stop_unused_session(dsn: str) -> None:
    provider = SessionProvider(dsn)
    provider.stop_service()  # should not throw any exceptions


def test_sqlite_provider(dsn: str) -> None:
    provider = SessionProvider(dsn)

    try:
        if not provider.is_sqlite:
            pytest.skip('not running on sqlite')

        assert not provider.is_postgres
        assert provider.session().expire_on_commit is False
    finally:
        provider.stop_service()


def test_sessionstore(context: Context) -> None:
    t1 = SessionThread(context)
    t2 = SessionThread(context)

    t1.start()
    t1.join()

    t2.start()
    t2.join()

    assert t1.session is not None
    assert t2.session is not None
    assert t1.session is not t2.session


def test_collision(context: Context) -> None:
    exceptions = book_concurrently([context] * 4)

    successes = [e for e in exceptions if e is None]
    conflicts = [
        e for e in exceptions
        if isinstance(e, errors.OverlappingAllocationError)
    ]

    assert len(successes) == 1
    assert len(conflicts) == 3

    bookings = new_booking_service(context)
    assert bookings.query().count() == 1
    assert bookings.store.allocations().count() == 1


def test_different_properties(context: Context) -> None:
    property_ids = [f'property-{i}' for i in range(6)]
    exceptions = book_concurrently([context] * 6, property_ids)

    assert exceptions == [None] * 6

    bookings = new_booking_service(context)
    assert bookings.query().count() == 6
    assert bookings.store.allocations().count() == 6
    assert {b.property_id for b in bookings.query()} == set(property_ids)


def test_sqlite_writers(tmp_path: Path) -> None:
    first = SessionProvider(f'sqlite:///{tmp_path}/first.db')
    again = SessionProvider(f'sqlite:///{tmp_path}/first.db')
    other = SessionProvider(f'sqlite:///{tmp_path}/other.db')

    try:
        with first.writing():
            # the same file is locked for every provider of the process
            lock = SessionProvider.sqlite_writers[first.url.database]
            assert not lock.acquire(blocking=False)

            with other.writing():
                pass

        with again.writing():
            pass
    finally:
        for provider in (first, again, other):
            provider.stop_service()


def test_rollback_on_error(context: Context) -> None:
    bookings = new_booking_service(context)

    with pytest.raises(RuntimeError):
        with bookings.write_unit('chalet'):
            bookings.session.add(Booking(
                'chalet', 'Ada', 'ada@example.org',
                date(2024, 8, 1), date(2024, 8, 5)
            ))
            bookings.session.flush()
            raise RuntimeError()

    assert bookings.query().count() == 0


def test_postgres_collision(postgres_context: Context) -> None:
    # separate contexts don't share their property locks, like separate
    # processes wouldn't
    contexts = [postgres_context]

    for _ in range(3):
        context = registry.register_context(new_uuid().hex)
        context.set_setting('dsn', postgres_context.get_setting('dsn'))
        contexts.append(context)

    try:
        exceptions = book_concurrently(contexts)
    finally:
        for context in contexts[1:]:
            context.get_service('session_provider').stop_service()

    def is_conflict(ex: Exception | None) -> bool:
        return isinstance(ex, errors.OverlappingAllocationError)

    assert exceptions.count(None) == 1
    assert all(is_conflict(e) for e in exceptions if e)

    bookings = new_booking_service(postgres_context)
    assert bookings.query().count() == 1
    assert bookings.store.allocations().count() == 1


def test_postgres_advisory_locks(postgres_context: Context) -> None:
    bookings = new_booking_service(postgres_context)
    assert bookings.session_provider.is_postgres

    with bookings.write_unit('chalet', 'cabin'):
        result = bookings.session.execute(text(
            "SELECT count(*) FROM pg_locks WHERE locktype = 'advisory'"
        )).scalar()

    assert result == 2


def test_postgres_write_unit_isolation(postgres_context: Context) -> None:
    bookings = new_booking_service(postgres_context)

    with bookings.write_unit('chalet'):
        level = bookings.session.execute(
            text('SHOW transaction_isolation')
        ).scalar()

    assert level == 'read committed'

    level = bookings.session.execute(
        text('SHOW transaction_isolation')
    ).scalar()
    bookings.rollback()

    assert level == 'serializable'
