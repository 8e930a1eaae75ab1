from .utcdatetime import UTCDateTime
from .uuid_type import UUID

__all__ = ['UTCDateTime', 'UUID']
