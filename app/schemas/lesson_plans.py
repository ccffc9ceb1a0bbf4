from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional

from app.schemas.common import StatusTrackedResponse


class LessonPlanCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[date] = None
    lesson_id: Optional[int] = None


class MilestoneCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    due_date: Optional[date] = None


class MilestoneResponse(StatusTrackedResponse):
    machine_name = "milestone"

    id: int
    lesson_plan_id: int
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LessonPlanResponse(StatusTrackedResponse):
    machine_name = "lesson_plan"

    id: int
    teacher_id: int
    lesson_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    created_at: datetime
    milestones: List[MilestoneResponse] = []

    class Config:
        from_attributes = True
