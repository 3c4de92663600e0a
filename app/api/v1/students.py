# app/api/v1/students.py
from __future__ import annotations

import math
from typing import List, Sequence

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.config import settings
from app.models.event import Event as EventModel
from app.schemas.common import Page, PageMeta
from app.schemas.event import Event
from app.schemas.relationship import EventWithStatus
from app.services.status import status_service

router = APIRouter()


def _paginate(rows: Sequence[EventModel], page: int, per_page: int) -> Page[Event]:
    total = len(rows)
    start = (page - 1) * per_page
    data: List[Event] = [Event.model_validate(e) for e in rows[start:start + per_page]]
    return Page[Event](
        data=data,
        meta=PageMeta(current_page=page, per_page=per_page, total=total, last_page=max(1, math.ceil(total / per_page))),
    )


@router.get("/{student_id}/events/upcoming", response_model=Page[Event])
def upcoming(
    student_id: int,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return _paginate(status_service.list_upcoming_for(db, student_id), page, per_page)


@router.get("/{student_id}/events/ongoing", response_model=Page[Event])
def ongoing(
    student_id: int,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return _paginate(status_service.list_ongoing_for(db, student_id), page, per_page)


@router.get("/{student_id}/events/past", response_model=Page[Event])
def past(
    student_id: int,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    return _paginate(status_service.list_past_for(db, student_id), page, per_page)


@router.get("/{student_id}/events/{event_id}/status", response_model=EventWithStatus)
def event_status(student_id: int, event_id: int, db: Session = Depends(get_db)):
    return EventWithStatus.model_validate(status_service.status_for(db, event_id, student_id))
