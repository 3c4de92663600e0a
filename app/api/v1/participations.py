# app/api/v1/participations.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_participation_gate
from app.schemas.relationship import Participation
from app.services.participation import ParticipationGate

router = APIRouter()


@router.post("/{event_id}/participations/{student_id}", response_model=Participation, status_code=status.HTTP_201_CREATED)
def join(
    event_id: int,
    student_id: int,
    gate: ParticipationGate = Depends(get_participation_gate),
    db: Session = Depends(get_db),
):
    p = gate.join(db, event_id=event_id, student_id=student_id)
    return Participation.model_validate(p)
