# app/services/status.py
"""Student-facing read projections.

Read-only: nothing here advances a phase. An event whose start or end time
has passed but which the scheduler has not reached yet is reported in its
stored phase until the next sweep.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.errors import EventNotFound
from app.crud.event import event_crud
from app.crud.relationship import attendance_crud, participation_crud, registration_crud
from app.models.attendance import Attendance
from app.models.event import Event
from app.models.participation import Participation
from app.models.registration import Registration


@dataclass
class StudentStatus:
    is_registered: bool = False
    is_participating: bool = False
    has_attended: bool = False
    registration: Optional[Registration] = None
    participation: Optional[Participation] = None
    attendance: Optional[Attendance] = None


@dataclass
class EventStatus:
    event: Event
    student_status: StudentStatus


class StatusService:
    def list_upcoming_for(self, db: Session, student_id: int) -> List[Event]:
        """Upcoming events the student has not registered for, soonest first."""
        return event_crud.upcoming_not_registered(db, student_id)

    def list_ongoing_for(self, db: Session, student_id: int) -> List[Event]:
        return event_crud.ongoing_participating(db, student_id)

    def list_past_for(self, db: Session, student_id: int) -> List[Event]:
        return event_crud.past_attended(db, student_id)

    def status_for(self, db: Session, event_id: int, student_id: int) -> EventStatus:
        event = event_crud.get(db, event_id)
        if event is None:
            raise EventNotFound(event_id)

        # only the table that matches the current phase is consulted
        status = StudentStatus()
        if event.is_upcoming():
            status.registration = registration_crud.get_pair(db, event_id=event_id, student_id=student_id)
            status.is_registered = status.registration is not None
        elif event.is_ongoing():
            status.participation = participation_crud.get_pair(db, event_id=event_id, student_id=student_id)
            status.is_participating = status.participation is not None
        elif event.is_past():
            status.attendance = attendance_crud.get_pair(db, event_id=event_id, student_id=student_id)
            status.has_attended = status.attendance is not None
        return EventStatus(event=event, student_status=status)

    def list_attendances(self, db: Session, event_id: int) -> List[Attendance]:
        if event_crud.get(db, event_id) is None:
            raise EventNotFound(event_id)
        return attendance_crud.list_for_event(db, event_id)


status_service = StatusService()
