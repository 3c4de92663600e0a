# app/services/registration.py
"""Admission and removal of registrations while an event is upcoming.

Both operations run as one transaction that starts by locking the event row
(``SELECT ... FOR UPDATE``); the duplicate and capacity checks happen under
that lock, so two students racing for the last slot cannot both get in.
"""
from __future__ import annotations

import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import Clock, utcnow
from app.core.errors import (
    CapacityExceeded,
    DuplicateRelationship,
    EventNotFound,
    InvalidState,
    NotEligible,
    NotRegistered,
)
from app.crud.event import event_crud
from app.crud.relationship import registration_crud
from app.models.event import EventState
from app.models.registration import Registration

logger = logging.getLogger(__name__)


class RegistrationGate:
    def __init__(self, clock: Clock = utcnow):
        self.clock = clock

    def register(self, db: Session, *, event_id: int, student_id: int, is_verified: bool) -> Registration:
        """Registers ``student_id`` for an upcoming event.

        Checks, in order: event exists, event is upcoming, student is eligible,
        no registration yet, a slot is free.
        """
        try:
            event = event_crud.get_for_update(db, event_id)
            if event is None:
                raise EventNotFound(event_id)
            if not event.is_upcoming():
                raise InvalidState(event_id, event.state, EventState.upcoming.value)
            if not is_verified:
                raise NotEligible(student_id)
            if registration_crud.exists(db, event_id=event_id, student_id=student_id):
                raise DuplicateRelationship(event_id, student_id, "registered")
            if not event.has_capacity():
                raise CapacityExceeded(event_id, event.capacity)

            registration = Registration(event_id=event_id, student_id=student_id, registered_at=self.clock())
            db.add(registration)
            event_crud.refresh_counters(db, event)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise DuplicateRelationship(event_id, student_id, "registered")
        except Exception:
            db.rollback()
            raise

        logger.info(
            "Student registered: event_id=%s student_id=%s registration_id=%s",
            event_id, student_id, registration.id,
        )
        return registration

    def unregister(self, db: Session, *, event_id: int, student_id: int) -> None:
        try:
            event = event_crud.get_for_update(db, event_id)
            if event is None:
                raise EventNotFound(event_id)
            # Checked before the row lookup: once the event has left "upcoming"
            # a leftover registration row does not make this legal.
            if not event.is_upcoming():
                raise InvalidState(event_id, event.state, EventState.upcoming.value)
            registration = registration_crud.get_pair(db, event_id=event_id, student_id=student_id)
            if registration is None:
                raise NotRegistered(event_id, student_id)

            db.delete(registration)
            event_crud.refresh_counters(db, event)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info("Student unregistered: event_id=%s student_id=%s", event_id, student_id)

    def is_registered(self, db: Session, *, event_id: int, student_id: int) -> bool:
        return registration_crud.exists(db, event_id=event_id, student_id=student_id)

    def list_registrations(self, db: Session, event_id: int) -> List[Registration]:
        if event_crud.get(db, event_id) is None:
            raise EventNotFound(event_id)
        return registration_crud.list_for_event(db, event_id)


registration_gate = RegistrationGate()
