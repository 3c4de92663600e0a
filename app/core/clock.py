# app/core/clock.py
from __future__ import annotations

import datetime as dt
from typing import Callable

# Anything returning "now" as an aware datetime. Services receive one instead of
# reading the wall clock themselves.
Clock = Callable[[], dt.datetime]


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def as_utc(value: dt.datetime) -> dt.datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)
