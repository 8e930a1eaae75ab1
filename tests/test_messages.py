from __future__ import annotations

from datetime import date
from occupancy.db.models import Allocation
from occupancy.modules import errors
from occupancy.modules import messages
from uuid import uuid4 as new_uuid


def conflict(type: str) -> errors.OverlappingAllocationError:
    existing = Allocation(
        entity_id=new_uuid(),
        type=type,  # type: ignore[arg-type]
        property_id='chalet',
        start=date(2024, 7, 1),
        end=date(2024, 7, 4)
    )

    return errors.OverlappingAllocationError(
        date(2024, 7, 3), date(2024, 7, 5), 'chalet', existing
    )


def test_render_conflicts() -> None:
    assert messages.render(conflict('booking')) == (
        'The dates 2024-07-03 to 2024-07-05 overlap an existing booking '
        'on chalet'
    )
    assert messages.render(conflict('block')) == (
        'The dates 2024-07-03 to 2024-07-05 overlap a block on chalet'
    )


def test_render_custom_catalogue() -> None:
    german = {
        'error.allocation.conflict.block': (
            '{property_id} ist vom {start} bis {end} gesperrt'
        )
    }

    assert messages.render(conflict('block'), german) == (
        'chalet ist vom 2024-07-03 bis 2024-07-05 gesperrt'
    )

    # missing keys fall back to english
    assert messages.render(errors.GuestNameRequired(), german) == (
        'The guest name is required'
    )


def test_render_not_found() -> None:
    uuid = new_uuid()

    assert messages.render(errors.UnknownBookingError(uuid)) == (
        f'Booking not found: {uuid}'
    )
    assert messages.render(errors.UnknownBlockError(uuid)) == (
        f'Block not found: {uuid}'
    )


def test_render_unknown() -> None:
    assert messages.render(errors.UnknownContext('foo')) == 'foo'

    catalogue = {'error.validation.invalid': 'Invalid: {field}'}
    assert messages.render(
        errors.DatesRequired('start'), catalogue
    ) == 'Start and end dates are required'
    assert messages.render(
        errors.InvalidInputError('start'), catalogue
    ) == 'Invalid: start'


def test_parameters() -> None:
    assert messages.parameters(conflict('booking')) == {
        'start': '2024-07-03',
        'end': '2024-07-05',
        'property_id': 'chalet',
        'type': 'booking',
    }
    assert messages.parameters(errors.InvalidEmailAddress()) == {
        'field': 'guest_email'
    }
    assert messages.parameters(errors.ContextIsLocked()) == {}
