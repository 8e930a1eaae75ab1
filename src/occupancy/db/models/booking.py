from __future__ import annotations

from sqlalchemy import types
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column
from sqlalchemy.schema import Index
from uuid import UUID, uuid4 as new_uuid

from occupancy.db.models.allocatable import AllocatableMixin
from occupancy.db.models.allocatable import AllocationStatus
from occupancy.db.models.allocatable import ALLOCATION_STATUSES
from occupancy.db.models.base import ORMBase
from occupancy.db.models.timestamp import TimestampMixin


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from datetime import date


class Booking(TimestampMixin, AllocatableMixin, ORMBase):
    """A guest staying at a property from start to end (both inclusive).

    Bookings are created active. Canceling a booking keeps it around, but
    frees its dates. A canceled booking may be rebooked if its dates are
    still available.

    """

    __tablename__ = 'bookings'

    allocation_type = 'booking'

    id: Mapped[UUID] = mapped_column(primary_key=True, default=new_uuid)

    guest_name: Mapped[str] = mapped_column(types.Text())

    guest_email: Mapped[str] = mapped_column(types.Text())

    status: Mapped[AllocationStatus] = mapped_column(
        types.Enum(*ALLOCATION_STATUSES, name='booking_status'),
        default='active'
    )

    __table_args__ = (
        Index('booking_property_ix', 'property_id', 'start', 'end'),
    )

    def __init__(
        self,
        property_id: str,
        guest_name: str,
        guest_email: str,
        start: date,
        end: date
    ) -> None:
        self.id = new_uuid()
        self.property_id = property_id
        self.guest_name = guest_name
        self.guest_email = guest_email
        self.start = start
        self.end = end
        self.status = 'active'

    def __repr__(self) -> str:
        return (
            f'<Booking {self.guest_email} {self.property_id} '
            f'{self.start}..{self.end} ({self.status})>'
        )

    @property
    def is_active(self) -> bool:
        return self.status == 'active'

    @property
    def allocation_status(self) -> AllocationStatus:
        return self.status
