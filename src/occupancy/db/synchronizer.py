from __future__ import annotations

import logging

from occupancy.db.models import Allocation
from occupancy.db.policy import ConflictPolicy
from occupancy.db.queries import AllocationStore
from occupancy.modules import errors


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from datetime import date
    from uuid import UUID

    from occupancy.context.core import Context
    from occupancy.db.models.allocatable import AllocationStatus
    from occupancy.db.models.allocatable import AllocationType


log = logging.getLogger('occupancy')


class LifecycleSynchronizer:
    """ Keeps the allocation of a booking or block in line with it.

    There's exactly one allocation per existing booking or block. The
    allocation reflects the owner's property, dates and (for bookings)
    status, it is never the source of these values.

    The methods are meant to be called inside the write unit changing the
    owner, so that the owner and its allocation change together or not
    at all.

    """

    def __init__(
        self,
        context: Context,
        store: AllocationStore | None = None,
        policy: ConflictPolicy | None = None
    ):
        self.context = context
        self.store = store or AllocationStore(context)
        self.policy = policy or ConflictPolicy(context, self.store)

    def on_create(
        self,
        entity_id: UUID,
        type: AllocationType,
        property_id: str,
        start: date,
        end: date,
        status: AllocationStatus = 'active'
    ) -> Allocation:
        """ Mirrors a new booking or block. The range of an active
        allocation must have been checked by the
        :class:`~occupancy.db.policy.ConflictPolicy` already.

        """
        if self.store.find_by_entity_id(entity_id) is not None:
            raise errors.DuplicateAllocationError(entity_id)

        return self.store.insert(Allocation(
            entity_id=entity_id,
            type=type,
            property_id=property_id,
            start=start,
            end=end,
            status=status
        ))

    def on_update_range(
        self,
        entity_id: UUID,
        property_id: str,
        start: date,
        end: date,
        type: AllocationType,
        status: AllocationStatus = 'active'
    ) -> None:
        """ Moves the allocation in place. It's never removed and added
        again, so there's no moment without (or with two) allocations.

        A missing allocation is created anew, with the given status.

        """
        if self.store.update_range_by_entity_id(
            entity_id, property_id, start, end
        ):
            return

        log.warning('allocation of %s %s was missing', type, entity_id)
        self.on_create(entity_id, type, property_id, start, end, status)

    def on_cancel(
        self,
        entity_id: UUID,
        property_id: str,
        start: date,
        end: date
    ) -> None:
        """ Frees the dates of a booking. The allocation is kept, but no
        longer takes part in availability checks.

        """
        if self.store.update_status_by_entity_id(
            entity_id, 'booking', 'canceled'
        ):
            return

        log.warning('allocation of booking %s was missing', entity_id)
        self.on_create(
            entity_id, 'booking', property_id, start, end,
            status='canceled'
        )

    def on_rebook(
        self,
        entity_id: UUID,
        property_id: str,
        start: date,
        end: date
    ) -> None:
        """ Claims the dates of a canceled booking again, if nothing else
        claimed them in the meantime.

        """
        allocation = self.store.find_by_entity_id(entity_id)

        if allocation is not None and allocation.is_active:
            return

        self.policy.check_available(
            property_id, start, end, exclude_entity_id=entity_id
        )

        if allocation is None:
            log.warning('allocation of booking %s was missing', entity_id)
            self.on_create(entity_id, 'booking', property_id, start, end)
        else:
            self.store.update_status_by_entity_id(
                entity_id, 'booking', 'active'
            )

    def on_delete(self, entity_id: UUID) -> None:
        """ Removes the allocation, if there is one. """
        self.store.delete_by_entity_id(entity_id)
