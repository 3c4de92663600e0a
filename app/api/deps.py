from fastapi import Depends, Header
from sqlalchemy.orm import sessionmaker

from app.core.clock import Clock, utcnow
from app.db.session import SessionLocal, get_db  # noqa: F401  (re-exported for routers/tests)
from app.services.lifecycle import LifecycleScheduler
from app.services.participation import ParticipationGate
from app.services.registration import RegistrationGate


def get_clock() -> Clock:
    return utcnow


def get_session_factory() -> sessionmaker:
    return SessionLocal


# ----------------------------------------------------------------------
# Eligibility comes from the identity gateway in front of this service,
# which sets X-Student-Verified after checking the student's verification.
# ----------------------------------------------------------------------
def get_student_verified(x_student_verified: str | None = Header(None, alias="X-Student-Verified")) -> bool:
    if not x_student_verified:
        return False
    return x_student_verified.strip().lower() in {"1", "true", "yes"}


def get_registration_gate(clock: Clock = Depends(get_clock)) -> RegistrationGate:
    return RegistrationGate(clock=clock)


def get_participation_gate(clock: Clock = Depends(get_clock)) -> ParticipationGate:
    return ParticipationGate(clock=clock)


def get_lifecycle(
    session_factory: sessionmaker = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
) -> LifecycleScheduler:
    return LifecycleScheduler(session_factory, clock=clock)
