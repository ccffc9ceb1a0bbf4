from pydantic import BaseModel, Field
from datetime import datetime

from app.models.lesson_request import LessonType
from app.schemas.common import StatusTrackedResponse


class RateCreate(BaseModel):
    lesson_type: LessonType
    rate_in_cents: int = Field(..., gt=0)


class RateChange(BaseModel):
    rate_in_cents: int = Field(..., gt=0)


class RateResponse(StatusTrackedResponse):
    machine_name = "teacher_rate"

    id: int
    teacher_id: int
    lesson_type: LessonType
    rate_in_cents: int
    created_at: datetime

    class Config:
        from_attributes = True
