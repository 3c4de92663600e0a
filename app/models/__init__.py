# Registers every table on Base.metadata (used by alembic and the test schema)
from app.models.event import Event, EventState  # noqa: F401
from app.models.registration import Registration  # noqa: F401
from app.models.participation import Participation  # noqa: F401
from app.models.attendance import Attendance  # noqa: F401

__all__ = ["Event", "EventState", "Registration", "Participation", "Attendance"]
