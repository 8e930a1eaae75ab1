from __future__ import annotations


from typing import NamedTuple
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from datetime import date


class DateRange(NamedTuple):
    """ An inclusive range of calendar dates. """

    start: date
    end: date
