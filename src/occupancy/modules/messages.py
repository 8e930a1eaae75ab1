""" Renders errors raised by occupancy into human readable text.

Occupancy itself never produces localized messages. Its errors carry a
message key and the values needed to describe the problem, this module
turns them into text for the layer presenting them (an HTTP API, a CLI).

Other languages are supported by passing a catalogue of your own::

    from occupancy.modules import messages

    german = {
        'error.allocation.conflict.booking': (
            'Die Daten {start} bis {end} sind für {property_id} '
            'bereits gebucht'
        ),
        ...
    }

    messages.render(error, german)

Keys missing in the given catalogue fall back to the english default.

"""
from __future__ import annotations

from occupancy.modules import errors


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import Any


DEFAULT_CATALOGUE: dict[str, str] = {
    'error.validation.invalid': 'The given values are invalid',
    'error.validation.propertyId.required': 'A property is required',
    'error.validation.dates.required': 'Start and end dates are required',
    'error.validation.dateRange.invalid': (
        'The end date must not be before the start date'
    ),
    'error.validation.guestName.required': 'The guest name is required',
    'error.validation.guestEmail.invalid': (
        'A valid guest e-mail address is required'
    ),
    'error.allocation.conflict.booking': (
        'The dates {start} to {end} overlap an existing booking '
        'on {property_id}'
    ),
    'error.allocation.conflict.block': (
        'The dates {start} to {end} overlap a block on {property_id}'
    ),
    'error.notfound': 'Nothing found with id {id}',
    'error.notfound.booking': 'Booking not found: {id}',
    'error.notfound.block': 'Block not found: {id}',
}


def parameters(error: errors.OccupancyError) -> dict[str, Any]:
    """ Returns the values an error message may refer to. """

    if isinstance(error, errors.OverlappingAllocationError):
        return {
            'start': error.start.isoformat(),
            'end': error.end.isoformat(),
            'property_id': error.property_id,
            'type': error.allocation_type,
        }

    if isinstance(error, errors.NotFoundError):
        return {'id': str(error.id)}

    if isinstance(error, errors.InvalidInputError):
        return {'field': error.field}

    return {}


def render(
    error: errors.OccupancyError,
    catalogue: Mapping[str, str] | None = None
) -> str:

    key: str | None = getattr(error, 'message_key', None)

    if key is None:
        return str(error)

    template = (catalogue or {}).get(key) or DEFAULT_CATALOGUE.get(key)

    if template is None:
        return key

    return template.format(**parameters(error))
