from __future__ import annotations

from sqlalchemy import types
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column
from sqlalchemy.schema import Index
from uuid import UUID, uuid4 as new_uuid

from occupancy.db.models.allocatable import AllocatableMixin
from occupancy.db.models.base import ORMBase
from occupancy.db.models.timestamp import TimestampMixin


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from datetime import date


class Block(TimestampMixin, AllocatableMixin, ORMBase):
    """Closes a property for the given days, e.g. for maintenance or for
    the owner's own use.

    Blocks have no status, a block that exists is in effect.

    """

    __tablename__ = 'blocks'

    allocation_type = 'block'

    id: Mapped[UUID] = mapped_column(primary_key=True, default=new_uuid)

    reason: Mapped[str | None] = mapped_column(types.Text())

    __table_args__ = (
        Index('block_property_ix', 'property_id', 'start', 'end'),
    )

    def __init__(
        self,
        property_id: str,
        start: date,
        end: date,
        reason: str | None = None
    ) -> None:
        self.id = new_uuid()
        self.property_id = property_id
        self.start = start
        self.end = end
        self.reason = reason

    def __repr__(self) -> str:
        return f'<Block {self.property_id} {self.start}..{self.end}>'
