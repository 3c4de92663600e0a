# app/core/errors.py
"""Domain errors raised by the event services.

Each carries a stable ``code`` and the HTTP status the API renders it with.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class LifecycleError(Exception):
    code = "EVENT_ERROR"
    status_code = 400

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class NotFound(LifecycleError):
    code = "NOT_FOUND"
    status_code = 404


class EventNotFound(NotFound):
    code = "EVENT_NOT_FOUND"

    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} not found", details={"event_id": event_id})
        self.event_id = event_id


class NotRegistered(NotFound):
    code = "NOT_REGISTERED"

    def __init__(self, event_id: int, student_id: int):
        super().__init__(
            f"Student {student_id} is not registered for event {event_id}",
            details={"event_id": event_id, "student_id": student_id},
        )


class InvalidState(LifecycleError):
    code = "INVALID_STATE"
    status_code = 400

    def __init__(self, event_id: int, state: str, expected: str):
        super().__init__(
            f"Event {event_id} is not {expected} (current state: {state})",
            details={"event_id": event_id, "state": state, "expected": expected},
        )
        self.state = state
        self.expected = expected


class NotEligible(LifecycleError):
    code = "NOT_ELIGIBLE"
    status_code = 403

    def __init__(self, student_id: int):
        super().__init__(
            f"Student {student_id} is not eligible to register for events",
            details={"student_id": student_id},
        )


class DuplicateRelationship(LifecycleError):
    code = "DUPLICATE_RELATIONSHIP"
    status_code = 409

    def __init__(self, event_id: int, student_id: int, kind: str):
        super().__init__(
            f"Student {student_id} is already {kind} for event {event_id}",
            details={"event_id": event_id, "student_id": student_id, "kind": kind},
        )
        self.kind = kind


class CapacityExceeded(LifecycleError):
    code = "CAPACITY_EXCEEDED"
    status_code = 409

    def __init__(self, event_id: int, capacity: int):
        super().__init__(
            f"Event {event_id} has reached maximum capacity ({capacity})",
            details={"event_id": event_id, "capacity": capacity},
        )


class ValidationError(LifecycleError):
    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class ProtectedDeletion(LifecycleError):
    code = "PROTECTED_DELETION"
    status_code = 400

    def __init__(self, event_id: int, attendance_count: int):
        super().__init__(
            f"Cannot delete event {event_id} with {attendance_count} attendance records",
            details={"event_id": event_id, "attendance_count": attendance_count},
        )
