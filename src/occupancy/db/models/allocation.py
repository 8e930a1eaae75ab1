from __future__ import annotations

from sqlalchemy import types
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column
from sqlalchemy.schema import Index
from uuid import UUID, uuid4 as new_uuid

from occupancy.db.models.allocatable import AllocationStatus
from occupancy.db.models.allocatable import AllocationType
from occupancy.db.models.allocatable import ALLOCATION_STATUSES
from occupancy.db.models.allocatable import ALLOCATION_TYPES
from occupancy.db.models.allocatable import RangeMixin
from occupancy.db.models.base import ORMBase
from occupancy.db.models.timestamp import TimestampMixin


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from datetime import date


class Allocation(TimestampMixin, RangeMixin, ORMBase):
    """Describes a range of days claimed on a property.

    Allocations are never created directly. They mirror the bookings and
    blocks owning them (see :attr:`entity_id`), which is what makes a
    single overlap check cover both kinds of claims.

    Among the *active* allocations of a property, no two overlap. Canceled
    allocations are kept around but ignored by the availability checks.

    """

    __tablename__ = 'allocations'

    #: the id of the allocation
    id: Mapped[UUID] = mapped_column(primary_key=True, default=new_uuid)

    #: what kind of entity claims the range
    type: Mapped[AllocationType] = mapped_column(
        types.Enum(*ALLOCATION_TYPES, name='allocation_type')
    )

    #: canceled allocations don't take part in availability checks
    status: Mapped[AllocationStatus] = mapped_column(
        types.Enum(*ALLOCATION_STATUSES, name='allocation_status'),
        default='active'
    )

    #: the id of the booking or block owning this allocation
    entity_id: Mapped[UUID] = mapped_column(unique=True)

    __table_args__ = (
        Index(
            'allocation_availability_ix',
            'property_id', 'status', 'start', 'end'
        ),
    )

    def __init__(
        self,
        entity_id: UUID,
        type: AllocationType,
        property_id: str,
        start: date,
        end: date,
        status: AllocationStatus = 'active'
    ) -> None:
        # NOTE: Avoid auto-generated __init__, the mypy plugin is
        #       deprecated and cannot be used with newer versions.
        self.id = new_uuid()
        self.entity_id = entity_id
        self.type = type
        self.property_id = property_id
        self.start = start
        self.end = end
        self.status = status

    def __repr__(self) -> str:
        return (
            f'<Allocation {self.type} {self.property_id} '
            f'{self.start}..{self.end} ({self.status})>'
        )

    @property
    def is_active(self) -> bool:
        return self.status == 'active'
