from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.db.types import UTCDateTime


class Attendance(Base):
    """Historical record left behind once an event is past."""

    __tablename__ = "event_attendances"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), index=True)
    student_id: Mapped[int] = mapped_column(Integer, index=True)
    participation_start: Mapped[datetime] = mapped_column(UTCDateTime())
    event_end: Mapped[datetime] = mapped_column(UTCDateTime())
    duration_minutes: Mapped[int] = mapped_column(Integer)

    __table_args__ = (
        UniqueConstraint("event_id", "student_id", name="uq_attendance_event_student"),
        CheckConstraint("duration_minutes >= 0", name="duration_non_negative"),
    )
