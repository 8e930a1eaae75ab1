from __future__ import annotations

import logging

from occupancy.db.models import Booking
from occupancy.db.service import EntityService
from occupancy.modules import errors
from occupancy.modules import events
from occupancy.modules import utils


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from datetime import date
    from uuid import UUID


log = logging.getLogger('occupancy')


class BookingService(EntityService[Booking]):
    """ Creates, changes, cancels, rebooks and removes bookings, keeping
    their allocations in line.

    Bookings go through the following states::

        create -> active -- cancel --> canceled -- rebook --> active
        (any state) -- delete --> removed

    Rebooking only succeeds if the dates of the booking are still free.

    """

    model = Booking
    not_found = errors.UnknownBookingError

    def validate(
        self,
        property_id: str | None,
        guest_name: str | None,
        guest_email: str | None,
        start: date | None,
        end: date | None
    ) -> None:

        self.validate_range(property_id, start, end)

        if utils.is_blank(guest_name):
            raise errors.GuestNameRequired()

        if utils.is_blank(guest_email):
            raise errors.InvalidEmailAddress()

        assert guest_email is not None
        if not self.validate_email(guest_email):
            raise errors.InvalidEmailAddress()

    def create(
        self,
        property_id: str,
        guest_name: str,
        guest_email: str,
        start: date,
        end: date
    ) -> Booking:
        """ Books the property for the given guest from start to end
        (inclusive).

        Raises :class:`~occupancy.modules.errors.InvalidInputError` if the
        values are invalid and
        :class:`~occupancy.modules.errors.OverlappingAllocationError` if the
        dates are taken by another booking or a block. Nothing is written
        in either case.

        """
        self.validate(property_id, guest_name, guest_email, start, end)

        with self.write_unit(property_id):
            self.policy.check_available(property_id, start, end)

            booking = self.add(Booking(
                property_id=property_id,
                guest_name=guest_name,
                guest_email=guest_email,
                start=start,
                end=end
            ))

        log.info('created %r', booking)
        events.on_booking_created(self.context, booking)

        return booking

    def update(
        self,
        id: UUID | str,
        guest_name: str,
        guest_email: str,
        start: date,
        end: date
    ) -> Booking:
        """ Changes the guest and the dates of a booking. The property of
        a booking can't be changed.

        The new dates are checked against all other active allocations. The
        booking's own allocation is not in the way, so keeping or shifting
        the dates into the old ones is fine.

        """
        booking = self.get(id)

        self.validate(
            booking.property_id, guest_name, guest_email, start, end
        )

        with self.write_unit(booking.property_id):
            current = self.by_id(booking.id)

            if current is None:
                raise errors.UnknownBookingError(booking.id)

            booking = current

            self.policy.check_available(
                booking.property_id, start, end,
                exclude_entity_id=booking.id
            )

            booking.guest_name = guest_name
            booking.guest_email = guest_email
            booking.start = start
            booking.end = end

            self.reallocate(booking)

        log.info('updated %r', booking)
        events.on_booking_updated(self.context, booking)

        return booking

    def cancel(self, id: UUID | str) -> Booking:
        """ Cancels the booking, freeing its dates. Canceling a canceled
        booking changes nothing.

        """
        booking = self.get(id)

        if not booking.is_active:
            return booking

        with self.write_unit(booking.property_id):
            current = self.by_id(booking.id)

            if current is None:
                raise errors.UnknownBookingError(booking.id)

            booking = current

            # canceled by someone else in the meantime
            if not booking.is_active:
                return booking

            booking.status = 'canceled'
            self.session.flush()

            self.synchronizer.on_cancel(
                booking.id, booking.property_id, booking.start, booking.end
            )

        log.info('canceled %r', booking)
        events.on_booking_canceled(self.context, booking)

        return booking

    def rebook(self, id: UUID | str) -> Booking:
        """ Activates a canceled booking again. Active bookings are
        returned unchanged.

        Raises :class:`~occupancy.modules.errors.OverlappingAllocationError`
        if the dates were taken in the meantime, the booking stays
        canceled in this case.

        """
        booking = self.get(id)

        if booking.is_active:
            return booking

        with self.write_unit(booking.property_id):
            current = self.by_id(booking.id)

            if current is None:
                raise errors.UnknownBookingError(booking.id)

            booking = current

            if booking.is_active:
                return booking

            self.synchronizer.on_rebook(
                booking.id, booking.property_id, booking.start, booking.end
            )

            booking.status = 'active'
            self.session.flush()

        log.info('rebooked %r', booking)
        events.on_booking_rebooked(self.context, booking)

        return booking

    def delete(self, id: UUID | str) -> None:
        """ Removes the booking and its allocation. Removing a booking that
        doesn't exist (anymore) is not an error.

        """
        booking = self.remove(id)

        if booking is not None:
            events.on_booking_deleted(self.context, booking)
