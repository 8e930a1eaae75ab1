from __future__ import annotations

from occupancy.db.models.base import ORMBase
from occupancy.db.models.allocation import Allocation
from occupancy.db.models.booking import Booking
from occupancy.db.models.block import Block
from occupancy.db.models.daterange import DateRange


from typing import Union


#: anything owning an allocation, tagged by its allocation_type
Allocatable = Union[Booking, Block]


__all__ = [
    'ORMBase', 'Allocatable', 'Allocation', 'Block', 'Booking', 'DateRange'
]
