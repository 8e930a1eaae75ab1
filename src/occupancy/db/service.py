from __future__ import annotations

import logging

from contextlib import contextmanager
from datetime import date, datetime
from sqlalchemy import text

from occupancy.context.core import ContextServicesMixin
from occupancy.db.policy import ConflictPolicy
from occupancy.db.queries import AllocationStore
from occupancy.db.synchronizer import LifecycleSynchronizer
from occupancy.modules import errors
from occupancy.modules import utils


from typing import Generic
from typing import TypeVar
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from collections.abc import Iterator
    from sqlalchemy.orm import Query

    from uuid import UUID

    from occupancy.context.core import Context
    from occupancy.db.models import Allocatable

_E = TypeVar('_E', bound='Allocatable')


log = logging.getLogger('occupancy')


class EntityService(ContextServicesMixin, Generic[_E]):
    """ Shared base of the booking and block services.

    Every change goes through :meth:`write_unit`, which makes reading the
    current allocations, deciding and writing the entity together with its
    allocation a single all-or-nothing step, serialized per property.

    """

    model: type[_E]
    not_found: type[errors.NotFoundError] = errors.NotFoundError

    def __init__(self, context: Context):
        self.context = context
        self.store = AllocationStore(context)
        self.policy = ConflictPolicy(context, self.store)
        self.synchronizer = LifecycleSynchronizer(
            context, self.store, self.policy
        )

    @contextmanager
    def write_unit(self, *property_ids: str) -> Iterator[None]:
        """ Runs the wrapped block as one transaction, holding the locks
        of the given properties.

        The block's changes are committed when it exits and rolled back
        entirely if it raises. Whatever transaction the session had open
        before is committed first, the unit must not read anything from
        before the locks were taken.

        SQLite has a single writer per database, so on SQLite the units
        additionally take turns with all other units writing to the same
        file, whatever properties they touch.

        """
        self.commit()

        with self.property_locks.hold(*property_ids):
            with self.session_provider.writing():
                try:
                    self.lock_properties_in_database(property_ids)
                    yield
                    self.session.flush()
                    self.commit()
                except BaseException:
                    self.rollback()
                    raise

    def lock_properties_in_database(
        self,
        property_ids: tuple[str, ...]
    ) -> None:
        """ Serializes units of different processes on PostgreSQL. The
        advisory locks are released by the end of the transaction.

        The unit runs at READ COMMITTED. Its reads then see what the unit
        it waited for has committed, instead of a snapshot taken before
        the lock was granted.

        """
        if not self.session_provider.is_postgres:
            return

        if not self.context.get_setting('advisory_locks'):
            return

        self.session.connection(
            execution_options={'isolation_level': 'READ COMMITTED'}
        )

        for property_id in sorted(set(property_ids)):
            self.session.execute(
                text('SELECT pg_advisory_xact_lock(hashtext(:key))'),
                {'key': f'occupancy/{property_id}'}
            )

    def validate_range(
        self,
        property_id: str | None,
        start: date | None,
        end: date | None
    ) -> None:
        """ Checks the values shared by bookings and blocks. Runs before
        any allocation is looked at.

        """
        if utils.is_blank(property_id):
            raise errors.PropertyRequired()

        # datetimes are dates too, but they don't compare with dates
        if not isinstance(start, date) or isinstance(start, datetime):
            raise errors.DatesRequired('start')

        if not isinstance(end, date) or isinstance(end, datetime):
            raise errors.DatesRequired('end')

        if end < start:
            raise errors.InvalidDateRange()

    def query(self) -> Query[_E]:
        return self.session.query(self.model)

    def by_id(self, id: UUID | str) -> _E | None:
        """ Returns the entity with the given id or None.

        The entity is always read from the database, overwriting what the
        session knew about it. Write units rely on this, they must not
        use values read before their locks were taken.

        """
        uuid = utils.as_uuid(id)

        if uuid is None:
            return None

        query = self.query().filter(self.model.id == uuid)
        query = query.populate_existing()

        return query.one_or_none()

    def get(self, id: UUID | str) -> _E:
        """ Returns the entity with the given id, raising if there's no
        such entity.

        """
        entity = self.by_id(id)

        if entity is None:
            raise self.not_found(id)  # type: ignore[arg-type]

        return entity

    def add(self, entity: _E) -> _E:
        """ Persists a new entity and allocates its range. Its range must
        have been checked already.

        """
        self.session.add(entity)
        self.session.flush()

        self.synchronizer.on_create(
            entity.id,
            entity.allocation_type,
            entity.property_id,
            entity.start,
            entity.end,
            entity.allocation_status
        )

        return entity

    def reallocate(self, entity: _E) -> None:
        """ Moves the allocation of the entity to its current range. """

        self.session.flush()

        self.synchronizer.on_update_range(
            entity.id,
            entity.property_id,
            entity.start,
            entity.end,
            entity.allocation_type,
            entity.allocation_status
        )

    def list_by_property_and_range(
        self,
        property_id: str,
        start: date,
        end: date
    ) -> list[_E]:
        """ Returns the entities of the property overlapping the given
        range, ordered by start. Listings are plain reads and don't wait
        for ongoing changes.

        """
        query = self.query()
        query = query.filter(self.model.property_id == property_id)
        query = AllocationStore.overlapping(query, self.model, start, end)
        query = query.order_by(self.model.start)

        return query.all()

    def list_by_property_and_month(
        self,
        property_id: str,
        year: int,
        month: int
    ) -> list[_E]:
        start, end = utils.month_range(year, month)
        return self.list_by_property_and_range(property_id, start, end)

    def remove(self, id: UUID | str) -> _E | None:
        """ Removes the entity and its allocation. Returns the removed
        entity, or None if there was nothing to remove.

        """
        entity = self.by_id(id)

        if entity is None:
            return None

        with self.write_unit(entity.property_id):
            entity = self.by_id(entity.id)

            # removed by someone else in the meantime
            if entity is None:
                return None

            self.session.delete(entity)
            self.synchronizer.on_delete(entity.id)

        log.info('removed %r', entity)
        return entity
