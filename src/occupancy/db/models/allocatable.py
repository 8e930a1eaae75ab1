from __future__ import annotations

from datetime import date
from sqlalchemy import types
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column

from occupancy.db.models.daterange import DateRange


from typing import ClassVar
from typing import Literal


AllocationType = Literal['booking', 'block']
AllocationStatus = Literal['active', 'canceled']

ALLOCATION_TYPES: tuple[AllocationType, ...] = ('booking', 'block')
ALLOCATION_STATUSES: tuple[AllocationStatus, ...] = ('active', 'canceled')


class RangeMixin:
    """ The columns shared by everything claiming a range of days on a
    property. Both dates are inclusive.

    """

    property_id: Mapped[str] = mapped_column(types.Text())

    start: Mapped[date]

    end: Mapped[date]

    @property
    def daterange(self) -> DateRange:
        return DateRange(self.start, self.end)


class AllocatableMixin(RangeMixin):
    """ Bookings and blocks, the owners of allocations. Each subclass
    tags the allocation mirroring it with its allocation type.

    """

    allocation_type: ClassVar[AllocationType]

    @property
    def allocation_status(self) -> AllocationStatus:
        """ The status the allocation of this entity should have. """
        return 'active'
