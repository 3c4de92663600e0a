# app/services/events.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.clock import as_utc
from app.core.errors import EventNotFound, ProtectedDeletion, ValidationError
from app.crud.event import event_crud
from app.models.event import Event, EventState
from app.schemas.event import EventCreate, EventUpdate

logger = logging.getLogger(__name__)

# Derived by the engine, never settable by callers
READ_ONLY_FIELDS = {"state", "registration_count", "participation_count", "attendance_count"}
EDITABLE_FIELDS = {"title", "description", "start_time", "end_time", "capacity"}


def _validate_window(start_time: datetime, end_time: datetime) -> None:
    if as_utc(end_time) <= as_utc(start_time):
        raise ValidationError("The end time must be after the start time.", field="end_time")


def _validate_capacity(capacity: Optional[int]) -> None:
    if capacity is not None and capacity < 1:
        raise ValidationError("Capacity must be at least 1.", field="capacity")


def _as_dict(obj_in: EventCreate | EventUpdate | Dict[str, Any], *, partial: bool) -> Dict[str, Any]:
    if isinstance(obj_in, dict):
        return dict(obj_in)
    return obj_in.model_dump(exclude_unset=partial)


class EventService:
    def create_event(self, db: Session, obj_in: EventCreate | Dict[str, Any]) -> Event:
        data = _as_dict(obj_in, partial=False)
        forbidden = READ_ONLY_FIELDS & data.keys()
        if forbidden:
            raise ValidationError(f"Fields cannot be set directly: {', '.join(sorted(forbidden))}")
        unknown = data.keys() - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
        for required in ("title", "start_time", "end_time"):
            if data.get(required) is None:
                raise ValidationError(f"{required} is required.", field=required)

        _validate_window(data["start_time"], data["end_time"])
        _validate_capacity(data.get("capacity"))

        # Always born upcoming with empty counters; the scheduler advances it
        event = event_crud.build(
            data,
            extra={
                "state": EventState.upcoming.value,
                "registration_count": 0,
                "participation_count": 0,
                "attendance_count": 0,
            },
        )
        try:
            db.add(event); db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(event)
        logger.info("Event created: event_id=%s title=%r start=%s end=%s", event.id, event.title, event.start_time, event.end_time)
        return event

    def update_event(self, db: Session, event_id: int, obj_in: EventUpdate | Dict[str, Any]) -> Event:
        data = _as_dict(obj_in, partial=True)
        forbidden = READ_ONLY_FIELDS & data.keys()
        if forbidden:
            raise ValidationError(f"Fields cannot be set directly: {', '.join(sorted(forbidden))}")
        unknown = data.keys() - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
        if not data:
            raise ValidationError("No updatable fields supplied.")
        for non_null in ("title", "start_time", "end_time"):
            if non_null in data and data[non_null] is None:
                raise ValidationError(f"{non_null} cannot be null.", field=non_null)

        try:
            event = event_crud.get_for_update(db, event_id)
            if event is None:
                raise EventNotFound(event_id)

            _validate_window(data.get("start_time", event.start_time), data.get("end_time", event.end_time))
            if "capacity" in data:
                capacity = data["capacity"]
                _validate_capacity(capacity)
                if capacity is not None and capacity < event.active_count:
                    raise ValidationError(
                        f"Capacity {capacity} is below the current {event.state} count ({event.active_count}).",
                        field="capacity",
                    )

            event_crud.apply(event, data)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(event)
        logger.info("Event updated: event_id=%s fields=%s", event.id, sorted(data))
        return event

    def delete_event(self, db: Session, event_id: int) -> None:
        try:
            event = event_crud.get_for_update(db, event_id)
            if event is None:
                raise EventNotFound(event_id)
            # Attendance rows are the historical record
            if not event.is_upcoming() and event.attendance_count > 0:
                raise ProtectedDeletion(event_id, event.attendance_count)
            # child rows go with the event (ON DELETE CASCADE)
            db.delete(event); db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("Event deleted: event_id=%s", event_id)

    def get_event(self, db: Session, event_id: int) -> Event:
        event = event_crud.get(db, event_id)
        if event is None:
            raise EventNotFound(event_id)
        return event

    def list_events(self, db: Session, *, state: Optional[EventState] = None, skip: int = 0, limit: int = 100) -> List[Event]:
        return event_crud.list_by_state(db, state=state, skip=skip, limit=limit)


event_service = EventService()
