from __future__ import annotations

from datetime import date
from occupancy.modules import utils
from uuid import uuid4


def test_is_blank() -> None:
    assert utils.is_blank(None)
    assert utils.is_blank('')
    assert utils.is_blank(' \t\n')
    assert not utils.is_blank('chalet')


def test_month_range() -> None:
    assert utils.month_range(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert utils.month_range(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))
    assert utils.month_range(2024, 12) == (
        date(2024, 12, 1), date(2024, 12, 31)
    )

    assert utils.month_range(2024, 4).end == date(2024, 4, 30)


def test_as_uuid() -> None:
    uuid = uuid4()

    assert utils.as_uuid(uuid) is uuid
    assert utils.as_uuid(str(uuid)) == uuid
    assert utils.as_uuid(uuid.hex) == uuid
    assert utils.as_uuid(None) is None
    assert utils.as_uuid('chalet') is None
