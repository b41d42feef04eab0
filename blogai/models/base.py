"""Base model and mixins for SQLAlchemy models."""

from datetime import datetime

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import String, TypeDecorator

from blogai.core.ids import generate_id


class StringID(TypeDecorator):
    """String identifier column; values are always handed back as `str`."""

    impl = String(32)
    cache_ok = True

    def process_result_value(self, value, dialect):
        if value is not None:
            return str(value)
        return value

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return value


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class IDMixin:
    """Mixin that adds a generated string primary key."""

    id: Mapped[str] = mapped_column(
        StringID(),
        primary_key=True,
        default=generate_id,
    )


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
