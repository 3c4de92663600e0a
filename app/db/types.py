# app/db/types.py
import datetime as dt

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from app.core.clock import as_utc


class UTCDateTime(TypeDecorator):
    """Timestamp column that always hands back aware UTC datetimes.

    SQLite has no timezone support and returns naive values; PostgreSQL returns
    values in the session timezone. Both are normalised here so the phase
    predicates can compare column values against the injected clock directly.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = as_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)

    @property
    def python_type(self):
        return dt.datetime
