"""
Declarative base for persisted records
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .clock import as_utc, utcnow


class Base(AsyncAttrs, DeclarativeBase):
    """Registry shared by all tables; datetimes are stored timezone-aware"""

    type_annotation_map = {
        datetime: DateTime(timezone=True),
        uuid.UUID: Uuid(as_uuid=True),
    }


class Record(Base):
    """
    UUID-keyed row with insert and update timestamps.

    ``created_at`` is when the row was stored, not when the underlying
    posting was published. Feed polling and freshness tokens key off it.
    """

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow)

    @property
    def stored_at(self) -> datetime:
        """``created_at`` as aware UTC (SQLite returns naive values)"""
        return as_utc(self.created_at)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
