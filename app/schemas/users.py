from pydantic import BaseModel
from datetime import datetime

from app.models.user import UserRole


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole
    created_at: datetime

    class Config:
        from_attributes = True


class TeacherSummary(BaseModel):
    """Teacher as shown to students browsing by lesson type"""
    id: int
    first_name: str
    last_name: str
    rate_in_cents: int


class TeacherStatistics(BaseModel):
    total_lessons: int
    completed_lessons: int
    upcoming_lessons: int
    total_earnings_in_cents: int
    total_goals: int
    completed_goals: int
    completion_rate: float
    goals_per_lesson: float
    goal_completion_rate: float
