from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.db.types import UTCDateTime


class EventState(str, Enum):
    upcoming = "upcoming"
    ongoing = "ongoing"
    past = "past"


# Only forward moves are legal
NEXT_STATE = {
    EventState.upcoming: EventState.ongoing,
    EventState.ongoing: EventState.past,
}


class Event(Base):
    """Scheduled live event.

    ``state`` and the three counters are derived data: they are written only by
    the registration/participation gates and the lifecycle scheduler, always
    while holding the row lock.
    """

    __tablename__ = "events"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text(), nullable=True)
    start_time: Mapped[datetime] = mapped_column(UTCDateTime())
    end_time: Mapped[datetime] = mapped_column(UTCDateTime())
    state: Mapped[str] = mapped_column(String(20), default=EventState.upcoming.value)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # null = unlimited
    registration_count: Mapped[int] = mapped_column(Integer, default=0)
    participation_count: Mapped[int] = mapped_column(Integer, default=0)
    attendance_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="time_window"),
        CheckConstraint("state IN ('upcoming', 'ongoing', 'past')", name="state_domain"),
        CheckConstraint("capacity IS NULL OR capacity > 0", name="capacity_positive"),
        CheckConstraint(
            "registration_count >= 0 AND participation_count >= 0 AND attendance_count >= 0",
            name="counters_non_negative",
        ),
        Index("ix_events_state_start_time", "state", "start_time"),
        Index("ix_events_state_end_time", "state", "end_time"),
    )

    def __repr__(self) -> str:
        return f"<Event id={self.id} state={self.state} start={self.start_time} end={self.end_time}>"

    def is_upcoming(self) -> bool:
        return self.state == EventState.upcoming

    def is_ongoing(self) -> bool:
        return self.state == EventState.ongoing

    def is_past(self) -> bool:
        return self.state == EventState.past

    @property
    def active_count(self) -> int:
        """Counter of the relationship set that matches the current phase."""
        if self.is_upcoming():
            return self.registration_count
        if self.is_ongoing():
            return self.participation_count
        return self.attendance_count

    def has_capacity(self) -> bool:
        if self.capacity is None:
            return True
        return self.active_count < self.capacity

    def should_transition_to_ongoing(self, now: datetime) -> bool:
        return self.is_upcoming() and now >= self.start_time

    def should_transition_to_past(self, now: datetime) -> bool:
        return self.is_ongoing() and now >= self.end_time
