# app/api/v1/registrations.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_registration_gate, get_student_verified
from app.schemas.relationship import Registration
from app.services.registration import RegistrationGate

router = APIRouter()


@router.post("/{event_id}/registrations/{student_id}", response_model=Registration, status_code=status.HTTP_201_CREATED)
def register(
    event_id: int,
    student_id: int,
    is_verified: bool = Depends(get_student_verified),
    gate: RegistrationGate = Depends(get_registration_gate),
    db: Session = Depends(get_db),
):
    reg = gate.register(db, event_id=event_id, student_id=student_id, is_verified=is_verified)
    return Registration.model_validate(reg)


@router.delete("/{event_id}/registrations/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def unregister(
    event_id: int,
    student_id: int,
    gate: RegistrationGate = Depends(get_registration_gate),
    db: Session = Depends(get_db),
):
    gate.unregister(db, event_id=event_id, student_id=student_id)
    return None
