""" Events are called by the booking and block services whenever a
lifecycle transition has been committed.

The implementation is very simple:

To add an event::

    from occupancy.modules import events

    def on_booking_created(context, booking):
        pass

    events.on_booking_created.append(on_booking_created)

To remove the same event::

    events.on_booking_created.remove(on_booking_created)

Events are called in the order they were added. They are only called
once the write unit has been committed, so a failing handler can't
leave the allocations in an inconsistent state.
"""
from __future__ import annotations


from typing import overload
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from collections.abc import Callable
    from typing_extensions import ParamSpec

    from occupancy.context.core import Context
    from occupancy.db.models import Block, Booking

    _P = ParamSpec('_P')


class Event(list['Callable[_P, object]']):
    """Event subscription. By http://stackoverflow.com/a/2022629

    A list of callable objects. Calling an instance of this will cause a
    call to each item in the list in ascending order by index.

    """
    @overload
    def __init__(self, f: type[Callable[_P, object]]) -> None: ...
    @overload
    def __init__(self) -> None: ...

    def __init__(self, f: object = None) -> None:
        return

    def __call__(self, *args: _P.args, **kwargs: _P.kwargs) -> None:
        for f in self:
            f(*args, **kwargs)


on_booking_created: Event[Context, Booking] = Event()
""" Called when a booking was created, with the following arguments:

    :context:
        The :class:`occupancy.context.core.Context` used when creating the
        booking.

    :booking:
        The :class:`occupancy.db.models.Booking` that was created.

"""

on_booking_updated: Event[Context, Booking] = Event()
""" Called when the guest or the dates of a booking changed. Same
arguments as :attr:`on_booking_created`.

"""

on_booking_canceled: Event[Context, Booking] = Event()
""" Called when an active booking was canceled. Canceling a booking that
is already canceled does not call this event.

"""

on_booking_rebooked: Event[Context, Booking] = Event()
""" Called when a canceled booking became active again. """

on_booking_deleted: Event[Context, Booking] = Event()
""" Called when a booking was removed. The booking passed is detached
from the session at this point.

"""

on_block_created: Event[Context, Block] = Event()
""" Called when a block was created, with the following arguments:

    :context:
        The :class:`occupancy.context.core.Context` used when creating the
        block.

    :block:
        The :class:`occupancy.db.models.Block` that was created.

"""

on_block_updated: Event[Context, Block] = Event()
""" Called when a block was moved or its reason changed. """

on_block_deleted: Event[Context, Block] = Event()
""" Called when a block was removed. """
