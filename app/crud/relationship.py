from typing import Any, List, Optional, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.crud.base import CRUDBase
from app.models.attendance import Attendance
from app.models.participation import Participation
from app.models.registration import Registration

RowType = TypeVar("RowType", Registration, Participation, Attendance)


class CRUDRelationship(CRUDBase[RowType, Any, Any]):
    """(event, student) child rows. One instance per phase-specific table."""

    def __init__(self, model: Type[RowType], *, order_by):
        super().__init__(model)
        self.order_by = order_by

    def get_pair(self, db: Session, *, event_id: int, student_id: int) -> Optional[RowType]:
        return db.execute(
            select(self.model).where(self.model.event_id == event_id, self.model.student_id == student_id)
        ).scalar_one_or_none()

    def exists(self, db: Session, *, event_id: int, student_id: int) -> bool:
        return self.get_pair(db, event_id=event_id, student_id=student_id) is not None

    def list_for_event(self, db: Session, event_id: int) -> List[RowType]:
        stmt = select(self.model).where(self.model.event_id == event_id).order_by(self.order_by, self.model.id.desc())
        return list(db.scalars(stmt).all())

    def delete_for_event(self, db: Session, event_id: int) -> int:
        result = db.execute(delete(self.model).where(self.model.event_id == event_id))
        return result.rowcount or 0


registration_crud = CRUDRelationship(Registration, order_by=Registration.registered_at.desc())
participation_crud = CRUDRelationship(Participation, order_by=Participation.joined_at.desc())
attendance_crud = CRUDRelationship(Attendance, order_by=Attendance.duration_minutes.desc())
