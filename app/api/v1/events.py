from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import settings
from app.models.event import EventState
from app.schemas.event import Event, EventCreate, EventUpdate
from app.schemas.relationship import Attendance, Participation, Registration
from app.services.events import event_service
from app.services.participation import participation_gate
from app.services.registration import registration_gate
from app.services.status import status_service

router = APIRouter()


@router.get("/", response_model=List[Event])
def list_events(
    state: Optional[EventState] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.MAX_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    rows = event_service.list_events(db, state=state, skip=skip, limit=limit)
    return [Event.model_validate(e) for e in rows]


@router.post("/", response_model=Event, status_code=status.HTTP_201_CREATED)
def create_event(body: EventCreate, db: Session = Depends(get_db)):
    e = event_service.create_event(db, body)
    return Event.model_validate(e)


@router.get("/{event_id}", response_model=Event)
def get_event(event_id: int, db: Session = Depends(get_db)):
    return Event.model_validate(event_service.get_event(db, event_id))


@router.patch("/{event_id}", response_model=Event)
def update_event(event_id: int, body: EventUpdate = Body(...), db: Session = Depends(get_db)):
    # state and counters are rejected by the service, not silently dropped
    e = event_service.update_event(db, event_id, body)
    return Event.model_validate(e)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: int, db: Session = Depends(get_db)):
    event_service.delete_event(db, event_id)
    return None  # 204


@router.get("/{event_id}/registrations", response_model=List[Registration])
def list_registrations(event_id: int, db: Session = Depends(get_db)):
    return [Registration.model_validate(r) for r in registration_gate.list_registrations(db, event_id)]


@router.get("/{event_id}/participations", response_model=List[Participation])
def list_participations(event_id: int, db: Session = Depends(get_db)):
    return [Participation.model_validate(p) for p in participation_gate.list_participations(db, event_id)]


@router.get("/{event_id}/attendances", response_model=List[Attendance])
def list_attendances(event_id: int, db: Session = Depends(get_db)):
    return [Attendance.model_validate(a) for a in status_service.list_attendances(db, event_id)]
