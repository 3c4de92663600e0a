# app/services/participation.py
from __future__ import annotations

import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import Clock, utcnow
from app.core.errors import CapacityExceeded, DuplicateRelationship, EventNotFound, InvalidState
from app.crud.event import event_crud
from app.crud.relationship import participation_crud
from app.models.event import EventState
from app.models.participation import Participation

logger = logging.getLogger(__name__)


class ParticipationGate:
    """Direct joins into an event that has already started."""

    def __init__(self, clock: Clock = utcnow):
        self.clock = clock

    def join(self, db: Session, *, event_id: int, student_id: int) -> Participation:
        try:
            event = event_crud.get_for_update(db, event_id)
            if event is None:
                raise EventNotFound(event_id)
            if not event.is_ongoing():
                raise InvalidState(event_id, event.state, EventState.ongoing.value)
            if participation_crud.exists(db, event_id=event_id, student_id=student_id):
                raise DuplicateRelationship(event_id, student_id, "participating")
            if not event.has_capacity():
                raise CapacityExceeded(event_id, event.capacity)

            participation = Participation(event_id=event_id, student_id=student_id, joined_at=self.clock())
            db.add(participation)
            event_crud.refresh_counters(db, event)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateRelationship(event_id, student_id, "participating")
        except Exception:
            db.rollback()
            raise

        logger.info(
            "Student joined event: event_id=%s student_id=%s participation_id=%s",
            event_id, student_id, participation.id,
        )
        return participation

    def is_participating(self, db: Session, *, event_id: int, student_id: int) -> bool:
        return participation_crud.exists(db, event_id=event_id, student_id=student_id)

    def list_participations(self, db: Session, event_id: int) -> List[Participation]:
        if event_crud.get(db, event_id) is None:
            raise EventNotFound(event_id)
        return participation_crud.list_for_event(db, event_id)


participation_gate = ParticipationGate()
