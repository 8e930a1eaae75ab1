from __future__ import annotations

import os
import pytest

from occupancy import new_block_service, new_booking_service
from occupancy import registry, setup_database
from occupancy.db.models import Allocation, Block, Booking
from occupancy.db.policy import ConflictPolicy
from occupancy.db.queries import AllocationStore
from occupancy.db.synchronizer import LifecycleSynchronizer
from testing.postgresql import Postgresql  # type: ignore[import-untyped]
from uuid import uuid4 as new_uuid


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from collections.abc import Generator
    from occupancy.context.core import Context
    from occupancy.db import BlockService, BookingService


def new_test_context(dsn: str, context_name: str | None = None) -> Context:

    context_name = context_name or new_uuid().hex

    context = registry.register_context(context_name, replace=True)
    context.set_setting('dsn', dsn)

    return context


def extinguish_records(context: Context) -> None:
    """ Removes every booking, block and allocation. """

    session = context.get_service('session_provider').session()
    session.rollback()

    for model in (Allocation, Booking, Block):
        session.query(model).delete()

    session.commit()
    session.close()


@pytest.fixture(scope='session')
def dsn(
    tmp_path_factory: pytest.TempPathFactory
) -> Generator[str, None, None]:

    dsn = os.environ.get('OCCUPANCY_TEST_DSN')

    if not dsn:
        path = tmp_path_factory.mktemp('occupancy') / 'occupancy.db'
        dsn = f'sqlite:///{path}'

    context = new_test_context(dsn)
    setup_database(context)

    yield dsn

    context.get_service('session_provider').stop_service()


@pytest.fixture(scope='session')
def postgres_dsn() -> Generator[str, None, None]:
    try:
        postgres = Postgresql()
    except RuntimeError:
        pytest.skip('PostgreSQL is not installed')

    context = new_test_context(postgres.url())
    setup_database(context)

    yield postgres.url()

    context.get_service('session_provider').stop_service()
    postgres.stop()


def _context(dsn: str) -> Generator[Context, None, None]:

    # clear the events before each test
    from occupancy.modules import events
    for event in (e for e in dir(events) if e.startswith('on_')):
        del getattr(events, event)[:]

    context = new_test_context(dsn)

    yield context

    extinguish_records(context)
    context.get_service('session_provider').stop_service()


@pytest.fixture
def context(dsn: str) -> Generator[Context, None, None]:
    yield from _context(dsn)


@pytest.fixture
def postgres_context(postgres_dsn: str) -> Generator[Context, None, None]:
    yield from _context(postgres_dsn)


@pytest.fixture
def bookings(context: Context) -> BookingService:
    return new_booking_service(context)


@pytest.fixture
def blocks(context: Context) -> BlockService:
    return new_block_service(context)


@pytest.fixture
def store(context: Context) -> AllocationStore:
    return AllocationStore(context)


@pytest.fixture
def policy(context: Context, store: AllocationStore) -> ConflictPolicy:
    return ConflictPolicy(context, store)


@pytest.fixture
def synchronizer(
    context: Context,
    store: AllocationStore,
    policy: ConflictPolicy
) -> LifecycleSynchronizer:
    return LifecycleSynchronizer(context, store, policy)
