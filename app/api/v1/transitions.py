# app/api/v1/transitions.py
from typing import Optional

from fastapi import APIRouter, Body, Depends

from app.api.deps import get_lifecycle
from app.schemas.common import TransitionRun, TransitionSummary
from app.services.lifecycle import LifecycleScheduler

router = APIRouter()


@router.post("/run", response_model=TransitionSummary)
def run_transitions(
    body: Optional[TransitionRun] = Body(None),
    lifecycle: LifecycleScheduler = Depends(get_lifecycle),
):
    """Manual sweep; same code path as the scheduled job."""
    return lifecycle.run_transitions(body.now if body else None)
