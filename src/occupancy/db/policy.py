from __future__ import annotations

import logging

from occupancy.db.queries import AllocationStore
from occupancy.modules import errors


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from datetime import date
    from uuid import UUID

    from occupancy.context.core import Context
    from occupancy.db.models import Allocation


log = logging.getLogger('occupancy')


class ConflictPolicy:
    """ Decides whether a range of days may be claimed on a property.

    Only active allocations take part, bookings and blocks alike. The
    policy never writes anything, it may be asked as often as needed.

    """

    def __init__(self, context: Context, store: AllocationStore | None = None):
        self.context = context
        self.store = store or AllocationStore(context)

    def conflicts(
        self,
        property_id: str,
        start: date,
        end: date,
        exclude_entity_id: UUID | None = None
    ) -> list[Allocation]:
        """ Returns the active allocations standing in the way of the
        given range.

        :exclude_entity_id:
            The booking or block being changed. Its own allocation is not
            in the way of itself, which is what allows an update to keep
            (or merely shift) its range. Pass None when creating.

        """
        overlapping = self.store.find_overlapping(property_id, start, end)

        if exclude_entity_id is None:
            return overlapping

        return [
            allocation for allocation in overlapping
            if allocation.entity_id != exclude_entity_id
        ]

    def check_available(
        self,
        property_id: str,
        start: date,
        end: date,
        exclude_entity_id: UUID | None = None
    ) -> None:
        """ Raises an
        :class:`~occupancy.modules.errors.OverlappingAllocationError` if the
        range overlaps an active allocation not excluded.

        """
        conflicts = self.conflicts(
            property_id, start, end, exclude_entity_id
        )

        if conflicts:
            existing = conflicts[0]
            log.debug(
                '%s..%s on %s conflicts with %r',
                start, end, property_id, existing
            )
            raise errors.OverlappingAllocationError(
                start, end, property_id, existing
            )

    def is_available(
        self,
        property_id: str,
        start: date,
        end: date,
        exclude_entity_id: UUID | None = None
    ) -> bool:
        return not self.conflicts(property_id, start, end, exclude_entity_id)
