from __future__ import annotations

import sedate

from datetime import datetime
from sqlalchemy.orm import Mapped
from sqlalchemy.orm import mapped_column


class TimestampMixin:
    """ Mixin providing created/modified timestamps for all records.

    The columns are deferred loaded as this is primarily for logging and
    future forensics.

    """

    created: Mapped[datetime] = mapped_column(
        default=sedate.utcnow,
        deferred=True
    )

    modified: Mapped[datetime | None] = mapped_column(
        onupdate=sedate.utcnow,
        deferred=True
    )
