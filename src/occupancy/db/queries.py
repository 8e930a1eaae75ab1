from __future__ import annotations

import logging

from occupancy.context.core import ContextServicesMixin
from occupancy.db.models import Allocation
from sqlalchemy.sql import and_


from typing import TypeVar
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from datetime import date
    from sqlalchemy.orm import Query
    from uuid import UUID

    from occupancy.context.core import Context
    from occupancy.db.models.allocatable import AllocationStatus
    from occupancy.db.models.allocatable import AllocationType
    from occupancy.db.models.allocatable import RangeMixin

_T = TypeVar('_T')


log = logging.getLogger('occupancy')


class AllocationStore(ContextServicesMixin):
    """ Reads and writes the allocations mirroring bookings and blocks.

    None of the methods commit. They flush where later queries of the
    same unit have to see the change.

    """

    def __init__(self, context: Context):
        self.context = context

    @staticmethod
    def overlapping(
        query: Query[_T],
        model: type[RangeMixin],
        start: date,
        end: date
    ) -> Query[_T]:
        """ Takes a query and limits it to the records of the given model
        overlapping with start and end. Both ranges are inclusive, so a
        range ending on the day another one starts overlaps it.

        """
        return query.filter(
            and_(
                model.start <= end,
                model.end >= start
            )
        )

    def allocations(self) -> Query[Allocation]:
        return self.session.query(Allocation)

    def in_range(
        self,
        property_id: str,
        start: date,
        end: date
    ) -> Query[Allocation]:
        """ All allocations of the property overlapping the given range,
        whatever their status.

        """
        query = self.allocations()
        query = query.filter(Allocation.property_id == property_id)
        query = self.overlapping(query, Allocation, start, end)
        query = query.order_by(Allocation.start)

        return query

    def find_overlapping(
        self,
        property_id: str,
        start: date,
        end: date,
        status: AllocationStatus = 'active'
    ) -> list[Allocation]:

        query = self.in_range(property_id, start, end)
        query = query.filter(Allocation.status == status)

        return query.all()

    def find_by_entity_id(self, entity_id: UUID) -> Allocation | None:
        query = self.allocations()
        query = query.filter(Allocation.entity_id == entity_id)

        return query.one_or_none()

    def insert(self, allocation: Allocation) -> Allocation:
        self.session.add(allocation)
        self.session.flush()

        return allocation

    def update_range_by_entity_id(
        self,
        entity_id: UUID,
        property_id: str,
        start: date,
        end: date
    ) -> int:
        """ Moves the allocation of the given entity in place. Returns the
        number of allocations changed.

        """
        query = self.allocations()
        query = query.filter(Allocation.entity_id == entity_id)

        return query.update({
            Allocation.property_id: property_id,
            Allocation.start: start,
            Allocation.end: end,
        }, synchronize_session='fetch')

    def update_status_by_entity_id(
        self,
        entity_id: UUID,
        type: AllocationType,
        status: AllocationStatus
    ) -> int:

        query = self.allocations()
        query = query.filter(Allocation.entity_id == entity_id)
        query = query.filter(Allocation.type == type)

        return query.update(
            {Allocation.status: status},
            synchronize_session='fetch'
        )

    def delete_by_entity_id(self, entity_id: UUID) -> int:
        query = self.allocations()
        query = query.filter(Allocation.entity_id == entity_id)

        count = query.delete(synchronize_session='fetch')

        if count:
            log.debug('removed allocation of %s', entity_id)

        return count
