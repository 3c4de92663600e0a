from typing import Generic, List, TypeVar
from datetime import datetime
from pydantic import BaseModel, Field

T = TypeVar("T")


class PageMeta(BaseModel):
    current_page: int
    per_page: int
    total: int
    last_page: int


class Page(BaseModel, Generic[T]):
    data: List[T]
    meta: PageMeta


class TransitionSummary(BaseModel):
    transitioned_to_ongoing: int = 0
    transitioned_to_past: int = 0
    failed_event_ids: List[int] = Field(default_factory=list)


class TransitionRun(BaseModel):
    now: datetime | None = None
