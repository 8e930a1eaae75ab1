from __future__ import annotations

from datetime import date
from dateutil.relativedelta import relativedelta
from uuid import UUID

from occupancy.db.models.daterange import DateRange


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def month_range(year: int, month: int) -> DateRange:
    """ Returns the first and the last day of the given month. """

    first = date(year, month, 1)
    return DateRange(first, first + relativedelta(months=1, days=-1))


def as_uuid(value: UUID | str | None) -> UUID | None:
    """ Turns ids coming from outside into uuids, None if they can't
    possibly be one.

    """
    if value is None or isinstance(value, UUID):
        return value

    try:
        return UUID(str(value))
    except ValueError:
        return None
