from __future__ import annotations

import logging

from occupancy.db.models import Block
from occupancy.db.service import EntityService
from occupancy.modules import errors
from occupancy.modules import events


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from datetime import date
    from uuid import UUID


log = logging.getLogger('occupancy')


class BlockService(EntityService[Block]):
    """ Creates, moves and removes blocks.

    Blocks have no status. They claim their dates for as long as they
    exist, no booking and no other block may overlap them.

    """

    model = Block
    not_found = errors.UnknownBlockError

    def create(
        self,
        property_id: str,
        start: date,
        end: date,
        reason: str | None = None
    ) -> Block:
        """ Blocks the property from start to end (inclusive).

        Raises :class:`~occupancy.modules.errors.InvalidInputError` if the
        values are invalid and
        :class:`~occupancy.modules.errors.OverlappingAllocationError` if the
        dates are taken by a booking or another block.

        """
        self.validate_range(property_id, start, end)

        with self.write_unit(property_id):
            self.policy.check_available(property_id, start, end)

            block = self.add(Block(
                property_id=property_id,
                start=start,
                end=end,
                reason=reason
            ))

        log.info('created %r', block)
        events.on_block_created(self.context, block)

        return block

    def update(
        self,
        id: UUID | str,
        property_id: str,
        start: date,
        end: date,
        reason: str | None = None
    ) -> Block:
        """ Moves the block, possibly to another property. The block
        itself is not in the way of its new dates.

        """
        block = self.get(id)

        self.validate_range(property_id, start, end)

        # moving between properties changes what both of them hold
        with self.write_unit(block.property_id, property_id):
            current = self.by_id(block.id)

            if current is None:
                raise errors.UnknownBlockError(block.id)

            block = current

            self.policy.check_available(
                property_id, start, end, exclude_entity_id=block.id
            )

            block.property_id = property_id
            block.start = start
            block.end = end
            block.reason = reason

            self.reallocate(block)

        log.info('updated %r', block)
        events.on_block_updated(self.context, block)

        return block

    def delete(self, id: UUID | str) -> None:
        """ Removes the block and its allocation. Removing a block that
        doesn't exist (anymore) is not an error.

        """
        block = self.remove(id)

        if block is not None:
            events.on_block_deleted(self.context, block)
