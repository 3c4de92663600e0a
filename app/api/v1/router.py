# app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1 import (
    events,
    registrations,
    participations,
    students,
    transitions,
)

api_router = APIRouter()

api_router.include_router(events.router,         prefix="/events",      tags=["events"])
api_router.include_router(registrations.router,  prefix="/events",      tags=["registrations"])
api_router.include_router(participations.router, prefix="/events",      tags=["participations"])
api_router.include_router(students.router,       prefix="/students",    tags=["students"])
api_router.include_router(transitions.router,    prefix="/transitions", tags=["transitions"])
