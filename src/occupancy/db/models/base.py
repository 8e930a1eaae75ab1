from __future__ import annotations

from datetime import date, datetime
from sqlalchemy import types
from sqlalchemy.orm import registry
from sqlalchemy.orm import DeclarativeBase
from uuid import UUID as PythonUUID

from .types import UTCDateTime
from .types import UUID


class ORMBase(DeclarativeBase):

    registry = registry(type_annotation_map={
        date: types.Date(),
        datetime: UTCDateTime(timezone=False),
        PythonUUID: UUID,
    })
