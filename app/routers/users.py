from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.models.user import User
from app.models.lesson_request import LessonType
from app.auth.dependencies import get_current_user, require_teacher
from app.schemas.users import UserResponse, TeacherStatistics, TeacherSummary
from app.services.lessons import teacher_statistics
from app.services.teacher_rates import find_teachers_with_active_rate, get_active_rate

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: User = Depends(get_current_user)):
    """Get current user profile"""
    return current_user


@router.get("/me/statistics", response_model=TeacherStatistics)
def get_my_statistics(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    """Lesson, earnings and goal counts for the calling teacher"""
    return teacher_statistics(db, current_user.id)


@router.get("/teachers", response_model=List[TeacherSummary])
def list_teachers_for_lesson_type(
    lesson_type: LessonType,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    """Teachers currently offering lesson_type, with their active hourly rate"""
    teachers = find_teachers_with_active_rate(db, lesson_type)
    summaries = []
    for teacher in teachers:
        rate = get_active_rate(db, teacher.id, lesson_type)
        summaries.append(TeacherSummary(
            id=teacher.id,
            first_name=teacher.first_name,
            last_name=teacher.last_name,
            rate_in_cents=rate.rate_in_cents,
        ))
    return summaries
