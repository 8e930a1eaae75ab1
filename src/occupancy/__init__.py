from __future__ import annotations

from occupancy.context.registry import create_default_registry
from occupancy.db import new_block_service
from occupancy.db import new_booking_service
from occupancy.db import setup_database

registry = create_default_registry()

__version__ = '0.1.0'
__all__ = (
    'new_block_service',
    'new_booking_service',
    'registry',
    'setup_database',
)
