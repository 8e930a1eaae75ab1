from __future__ import annotations


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from datetime import date
    from uuid import UUID
    from occupancy.db.models import Allocation


class OccupancyError(Exception):
    pass


class ContextAlreadyExists(OccupancyError):
    pass


class UnknownContext(OccupancyError):
    pass


class ContextIsLocked(OccupancyError):
    pass


class UnknownService(OccupancyError):
    pass


class InvalidInputError(OccupancyError):
    """ Raised before any allocation is looked at, if the given values
    can't possibly describe a valid booking or block.

    The message key and the field are meant for the layer that renders
    messages, see :mod:`occupancy.modules.messages`.

    """

    message_key = 'error.validation.invalid'
    field: str | None = None

    def __init__(self, field: str | None = None):
        super().__init__(field)

        if field is not None:
            self.field = field


class PropertyRequired(InvalidInputError):
    message_key = 'error.validation.propertyId.required'
    field = 'property_id'


class DatesRequired(InvalidInputError):
    message_key = 'error.validation.dates.required'


class InvalidDateRange(InvalidInputError):
    message_key = 'error.validation.dateRange.invalid'
    field = 'end'


class GuestNameRequired(InvalidInputError):
    message_key = 'error.validation.guestName.required'
    field = 'guest_name'


class InvalidEmailAddress(InvalidInputError):
    message_key = 'error.validation.guestEmail.invalid'
    field = 'guest_email'


class OverlappingAllocationError(OccupancyError):
    """ The requested range overlaps an active allocation on the same
    property. The existing allocation tells whether a booking or a block
    stands in the way.

    """

    __slots__ = ('start', 'end', 'property_id', 'existing')

    def __init__(
        self,
        start: date,
        end: date,
        property_id: str,
        existing: Allocation
    ):
        super().__init__(start, end, property_id)
        self.start = start
        self.end = end
        self.property_id = property_id
        self.existing = existing

    @property
    def allocation_type(self) -> str:
        return self.existing.type

    @property
    def message_key(self) -> str:
        return f'error.allocation.conflict.{self.allocation_type}'


class DuplicateAllocationError(OccupancyError):

    __slots__ = ('entity_id', )

    def __init__(self, entity_id: UUID):
        super().__init__(entity_id)
        self.entity_id = entity_id


class NotFoundError(OccupancyError):

    __slots__ = ('id', )

    message_key = 'error.notfound'

    def __init__(self, id: UUID):
        super().__init__(id)
        self.id = id


class UnknownBookingError(NotFoundError):
    message_key = 'error.notfound.booking'


class UnknownBlockError(NotFoundError):
    message_key = 'error.notfound.block'
