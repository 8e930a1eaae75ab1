from __future__ import annotations

import uuid

from sqlalchemy import types


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from sqlalchemy.engine import Dialect

    _Base = types.TypeDecorator['SoftUUID']
else:
    _Base = types.TypeDecorator


class SoftUUID(uuid.UUID):
    """ Behaves just like the UUID class, but allows strings to be compared
    with it, so that SoftUUID('my-uuid') == 'my-uuid' equals True.

    Entity ids arrive from outside (urls, forms) as strings more often
    than not.

    """

    def __eq__(self, other: object) -> bool:

        if isinstance(other, str):
            return self.hex == other.replace('-', '').strip().lower()

        if isinstance(other, uuid.UUID):
            return self.int == other.int

        return False

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash(self.int)


class UUID(_Base):
    """ A native uuid column on PostgreSQL, a 32 character string
    elsewhere, returning SoftUUIDs either way.

    """
    impl = types.Uuid(as_uuid=False)
    cache_ok = True

    def process_bind_param(
        self,
        value: uuid.UUID | str | None,
        dialect: Dialect
    ) -> str | None:

        if value is None:
            return None

        if isinstance(value, str):
            value = uuid.UUID(value)

        return str(value)

    def process_result_value(
        self,
        value: str | uuid.UUID | None,
        dialect: Dialect
    ) -> SoftUUID | None:

        if value is None:
            return None

        if isinstance(value, uuid.UUID):
            return SoftUUID(int=value.int)

        return SoftUUID(int=int(value.replace('-', ''), 16))
