from __future__ import annotations
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from app.schemas.event import Event


class Registration(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    student_id: int
    registered_at: datetime


class Participation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    student_id: int
    joined_at: datetime


class Attendance(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    student_id: int
    participation_start: datetime
    event_end: datetime
    duration_minutes: int


class StudentStatus(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_registered: bool = False
    is_participating: bool = False
    has_attended: bool = False
    registration: Optional[Registration] = None
    participation: Optional[Participation] = None
    attendance: Optional[Attendance] = None


class EventWithStatus(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event: Event
    student_status: StudentStatus
