# app/services/lifecycle.py
"""Time-driven phase transitions: upcoming -> ongoing -> past.

``LifecycleScheduler.run_transitions`` is meant to be called on a fixed
interval (APScheduler job or external cron). It is safe to call repeatedly or
from overlapping runners: each event is advanced in its own transaction that
locks the event row and re-checks the transition predicate first, so a second
runner finds the state already moved and does nothing.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy.exc import DBAPIError, DisconnectionError, InterfaceError
from sqlalchemy.orm import Session, sessionmaker

from app.core.clock import Clock, as_utc, utcnow
from app.core.errors import InvalidState
from app.crud.event import event_crud
from app.crud.relationship import participation_crud, registration_crud
from app.models.attendance import Attendance
from app.models.event import NEXT_STATE, Event, EventState
from app.models.participation import Participation
from app.schemas.common import TransitionSummary

logger = logging.getLogger(__name__)


def duration_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end``, never negative."""
    seconds = (as_utc(end) - as_utc(start)).total_seconds()
    return max(0, int(seconds // 60))


def is_infrastructure_failure(exc: BaseException) -> bool:
    """Storage is gone, as opposed to something wrong with one event."""
    if isinstance(exc, (DisconnectionError, InterfaceError)):
        return True
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


def _advance(event: Event, target: EventState) -> None:
    if NEXT_STATE.get(EventState(event.state)) != target:
        raise InvalidState(event.id, event.state, f"one step before {target.value}")
    event.state = target.value


class LifecycleScheduler:
    def __init__(self, session_factory: sessionmaker, clock: Clock = utcnow):
        self.session_factory = session_factory
        self.clock = clock

    def run_transitions(self, now: Optional[datetime] = None) -> TransitionSummary:
        now = as_utc(now if now is not None else self.clock())
        summary = TransitionSummary()

        with self.session_factory() as db:
            due_to_start = event_crud.ids_due_to_start(db, now)
        for event_id in due_to_start:
            if self._isolated(self.transition_to_ongoing, event_id, now, summary.failed_event_ids):
                summary.transitioned_to_ongoing += 1

        # Selected after the first pass, so an event whose whole window elapsed
        # between two sweeps goes through both steps in this run.
        with self.session_factory() as db:
            due_to_end = event_crud.ids_due_to_end(db, now)
        for event_id in due_to_end:
            if self._isolated(self.transition_to_past, event_id, now, summary.failed_event_ids):
                summary.transitioned_to_past += 1

        logger.info(
            "State transitions processed: transitioned_to_ongoing=%s transitioned_to_past=%s failed=%s",
            summary.transitioned_to_ongoing, summary.transitioned_to_past, summary.failed_event_ids,
        )
        return summary

    def _isolated(self, step: Callable[[int, datetime], bool], event_id: int, now: datetime, failed: List[int]) -> bool:
        try:
            return step(event_id, now)
        except Exception as exc:
            if is_infrastructure_failure(exc):
                logger.error("Storage unavailable during sweep (event_id=%s), aborting", event_id)
                raise
            # retried on the next tick: the predicate is evaluated fresh every run
            logger.exception("Failed to run %s for event_id=%s", step.__name__, event_id)
            failed.append(event_id)
            return False

    def transition_to_ongoing(self, event_id: int, now: Optional[datetime] = None) -> bool:
        """Moves one event to ongoing, turning every registration into a participation.

        Returns False when the event no longer qualifies (already advanced,
        deleted, or rescheduled).
        """
        now = as_utc(now if now is not None else self.clock())
        with self.session_factory() as db:
            try:
                event = event_crud.get_for_update(db, event_id)
                if event is None or not event.should_transition_to_ongoing(now):
                    db.rollback()
                    return False
                _advance(event, EventState.ongoing)
                converted = self._convert_registrations(db, event, now)
                event_crud.refresh_counters(db, event)
                db.commit()
            except Exception:
                db.rollback()
                raise
        logger.info("Event transitioned to ongoing: event_id=%s converted_registrations=%s", event_id, converted)
        return True

    def transition_to_past(self, event_id: int, now: Optional[datetime] = None) -> bool:
        """Moves one event to past, turning every participation into an attendance record."""
        now = as_utc(now if now is not None else self.clock())
        with self.session_factory() as db:
            try:
                event = event_crud.get_for_update(db, event_id)
                if event is None or not event.should_transition_to_past(now):
                    db.rollback()
                    return False
                _advance(event, EventState.past)
                converted = self._convert_participations(db, event)
                event_crud.refresh_counters(db, event)
                db.commit()
            except Exception:
                db.rollback()
                raise
        logger.info("Event transitioned to past: event_id=%s converted_participations=%s", event_id, converted)
        return True

    def _convert_registrations(self, db: Session, event: Event, now: datetime) -> int:
        # joined_at is the transition instant, not the original registration time
        registrations = registration_crud.list_for_event(db, event.id)
        for registration in registrations:
            db.add(Participation(event_id=event.id, student_id=registration.student_id, joined_at=now))
        registration_crud.delete_for_event(db, event.id)
        return len(registrations)

    def _convert_participations(self, db: Session, event: Event) -> int:
        participations = participation_crud.list_for_event(db, event.id)
        for participation in participations:
            db.add(
                Attendance(
                    event_id=event.id,
                    student_id=participation.student_id,
                    participation_start=participation.joined_at,
                    event_end=event.end_time,
                    duration_minutes=duration_minutes(participation.joined_at, event.end_time),
                )
            )
        participation_crud.delete_for_event(db, event.id)
        return len(participations)
