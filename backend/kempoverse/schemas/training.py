from typing import Literal
from datetime import datetime
from pydantic import BaseModel

from kempoverse.models import Category, SessionStatus

class SessionCreate(BaseModel):
    # Presence and range are checked by the session builder so each failure gets its own message
    duration_minutes: int | None = None
    categories: list[Category] | None = None

class SessionStatusUpdate(BaseModel):
    status: Literal["completed", "abandoned"] | None = None
    completed_at: datetime | None = None

class TrainingSessionItemRead(BaseModel):
    id: str
    session_id: str
    entry_id: str
    entry_title: str
    entry_category: Category
    time_allocated_seconds: int
    variation_type: str | None = None
    variation_text: str | None = None
    sequence_order: int
    completed_at: datetime | None = None

    model_config = {"from_attributes": True}

class TrainingSessionRead(BaseModel):
    id: str
    duration_minutes: int
    categories: list[Category]
    entry_count: int
    started_at: datetime
    completed_at: datetime | None = None
    status: SessionStatus

    model_config = {"from_attributes": True}

class TrainingSessionDetail(TrainingSessionRead):
    items: list[TrainingSessionItemRead]

class TrainingSessionList(BaseModel):
    sessions: list[TrainingSessionRead]
    total: int
