from __future__ import annotations

from occupancy.db.blocks import BlockService
from occupancy.db.bookings import BookingService
from occupancy.db.policy import ConflictPolicy
from occupancy.db.queries import AllocationStore
from occupancy.db.synchronizer import LifecycleSynchronizer


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from occupancy.context.core import Context


def _get_context(context: Context | str | None) -> Context:
    from occupancy import registry

    if context is None:
        return registry.current_context

    if isinstance(context, str):
        return registry.get_context(context)

    return context


def new_booking_service(
    context: Context | str | None = None
) -> BookingService:
    """ Returns a booking service operating on the given context (or
    the name of a context). Uses the current context by default.

    """
    return BookingService(_get_context(context))


def new_block_service(
    context: Context | str | None = None
) -> BlockService:
    """ Returns a block service operating on the given context (or the
    name of a context). Uses the current context by default.

    """
    return BlockService(_get_context(context))


def setup_database(context: Context | str | None = None) -> None:
    """ Creates the tables and indices required by occupancy. This needs
    to be called once per database. Multiple invocations won't hurt but
    they are unnecessary.

    """
    from occupancy.db.models import ORMBase

    service = BookingService(_get_context(context))
    ORMBase.metadata.create_all(service.session.bind)
    service.commit()


__all__ = (
    'AllocationStore',
    'BlockService',
    'BookingService',
    'ConflictPolicy',
    'LifecycleSynchronizer',
    'new_block_service',
    'new_booking_service',
    'setup_database',
)
