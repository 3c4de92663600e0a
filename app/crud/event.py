from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.attendance import Attendance
from app.models.event import Event, EventState
from app.models.participation import Participation
from app.models.registration import Registration
from app.schemas.event import EventCreate, EventUpdate


class CRUDEvent(CRUDBase[Event, EventCreate, EventUpdate]):
    def get_for_update(self, db: Session, event_id: int) -> Optional[Event]:
        """Loads the event holding its row lock until the transaction ends.

        Every write path takes this lock before touching child rows.
        """
        return db.execute(
            select(Event).where(Event.id == event_id).with_for_update().execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def list_by_state(self, db: Session, *, state: Optional[EventState] = None, skip: int = 0, limit: int = 100) -> List[Event]:
        stmt = select(Event)
        if state is not None:
            stmt = stmt.where(Event.state == state.value)
        stmt = stmt.order_by(Event.start_time.asc(), Event.id.asc()).offset(skip).limit(limit)
        return list(db.scalars(stmt).all())

    def ids_due_to_start(self, db: Session, now: datetime) -> List[int]:
        stmt = (
            select(Event.id)
            .where(Event.state == EventState.upcoming.value, Event.start_time <= now)
            .order_by(Event.start_time.asc(), Event.id.asc())
        )
        return list(db.scalars(stmt).all())

    def ids_due_to_end(self, db: Session, now: datetime) -> List[int]:
        stmt = (
            select(Event.id)
            .where(Event.state == EventState.ongoing.value, Event.end_time <= now)
            .order_by(Event.end_time.asc(), Event.id.asc())
        )
        return list(db.scalars(stmt).all())

    def refresh_counters(self, db: Session, event: Event) -> Event:
        """Recomputes the three counters from the child tables.

        Must run inside the transaction that changed the rows, after the lock.
        """
        db.flush()
        event.registration_count = _count(db, Registration, event.id)
        event.participation_count = _count(db, Participation, event.id)
        event.attendance_count = _count(db, Attendance, event.id)
        return event

    # ---- student-facing listings ----

    def upcoming_not_registered(self, db: Session, student_id: int) -> List[Event]:
        registered = select(Registration.id).where(
            Registration.event_id == Event.id, Registration.student_id == student_id
        )
        stmt = (
            select(Event)
            .where(Event.state == EventState.upcoming.value, ~registered.exists())
            .order_by(Event.start_time.asc(), Event.id.asc())
        )
        return list(db.scalars(stmt).all())

    def ongoing_participating(self, db: Session, student_id: int) -> List[Event]:
        stmt = (
            select(Event)
            .join(Participation, Participation.event_id == Event.id)
            .where(Event.state == EventState.ongoing.value, Participation.student_id == student_id)
            .order_by(Event.start_time.desc(), Event.id.desc())
        )
        return list(db.scalars(stmt).all())

    def past_attended(self, db: Session, student_id: int) -> List[Event]:
        stmt = (
            select(Event)
            .join(Attendance, Attendance.event_id == Event.id)
            .where(Event.state == EventState.past.value, Attendance.student_id == student_id)
            .order_by(Event.end_time.desc(), Event.id.desc())
        )
        return list(db.scalars(stmt).all())


def _count(db: Session, model, event_id: int) -> int:
    return db.scalar(select(func.count()).select_from(model).where(model.event_id == event_id)) or 0


event_crud = CRUDEvent(Event)
