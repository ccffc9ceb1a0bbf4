from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from typing import List, Optional

from app.models.lesson_request import LessonType
from app.schemas.common import StatusTrackedResponse
from app.services.pricing import format_cents


class LessonRequestCreate(BaseModel):
    lesson_type: LessonType
    start_time: datetime
    duration_minutes: int = Field(..., gt=0, le=480)
    address: str = Field(..., min_length=1, max_length=500)
    generate_quotes: bool = True

    @field_validator("address")
    @classmethod
    def address_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Address is required")
        return v.strip()


class LessonRequestResponse(BaseModel):
    id: int
    student_id: int
    lesson_type: LessonType
    start_time: datetime
    duration_minutes: int
    address: str
    created_at: datetime

    class Config:
        from_attributes = True


class GenerateQuotesRequest(BaseModel):
    teacher_ids: Optional[List[int]] = None


class LessonQuoteResponse(StatusTrackedResponse):
    machine_name = "lesson_quote"

    id: int
    lesson_request_id: int
    teacher_id: int
    cost_in_cents: int
    hourly_rate_in_cents: int
    expires_at: datetime
    created_at: datetime
    cost_display: str = ""

    class Config:
        from_attributes = True

    @model_validator(mode="after")
    def fill_cost_display(self):
        self.cost_display = format_cents(self.cost_in_cents)
        return self


class LessonRequestWithQuotes(LessonRequestResponse):
    quotes: List[LessonQuoteResponse] = []


class LessonResponse(StatusTrackedResponse):
    machine_name = "lesson"

    id: int
    quote_id: int
    lesson_request_id: int
    teacher_id: int
    student_id: int
    lesson_type: LessonType
    start_time: datetime
    duration_minutes: int
    address: str
    created_at: datetime

    class Config:
        from_attributes = True


class QuoteTransitionResponse(BaseModel):
    quote: LessonQuoteResponse
    lesson: Optional[LessonResponse] = None


class GoalCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    estimated_lesson_count: Optional[int] = Field(None, ge=1)


class GoalResponse(StatusTrackedResponse):
    machine_name = "goal"

    id: int
    lesson_id: int
    title: str
    description: Optional[str] = None
    estimated_lesson_count: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ObjectiveCreate(BaseModel):
    lesson_type: LessonType
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    target_date: Optional[date] = None


class ObjectiveResponse(StatusTrackedResponse):
    machine_name = "objective"

    id: int
    student_id: int
    lesson_type: LessonType
    title: str
    description: Optional[str] = None
    target_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LessonSummaryCreate(BaseModel):
    summary: str
    homework: str


class LessonSummaryResponse(BaseModel):
    id: int
    lesson_id: int
    summary: str
    homework: str
    created_at: datetime

    class Config:
        from_attributes = True
