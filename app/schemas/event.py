from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.models.event import EventState

# ---------------------------
# Event Schemas
# ---------------------------

class EventBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    capacity: Optional[int] = None

class EventCreate(EventBase):
    pass

class EventUpdate(BaseModel):
    # extras are kept so the service can reject derived fields (state, counters) explicitly
    model_config = ConfigDict(extra="allow")

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    capacity: int | None = None

class Event(EventBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    state: EventState
    registration_count: int
    participation_count: int
    attendance_count: int
