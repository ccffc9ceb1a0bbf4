from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.auth.dependencies import get_current_user
from app.schemas.common import StatusRecordResponse, TransitionRequest
from app.schemas.lessons import (
    GoalCreate,
    GoalResponse,
    LessonResponse,
    LessonSummaryCreate,
    LessonSummaryResponse,
)
from app.services import goals, lesson_summaries, lessons

router = APIRouter(prefix="/lessons", tags=["Lessons"])


@router.get("", response_model=List[LessonResponse])
def list_lessons(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Lessons taught (teachers) or booked (students); admins see all"""
    return lessons.list_lessons_for_user(db, current_user)


@router.get("/{lesson_id}", response_model=LessonResponse)
def get_lesson(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lessons.get_lesson(db, lesson_id, current_user)


@router.post("/{lesson_id}/transitions", response_model=LessonResponse)
def transition_lesson(
    lesson_id: int,
    data: TransitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lessons.transition_lesson(db, lesson_id, data.transition, current_user, data.context)


@router.get("/{lesson_id}/history", response_model=List[StatusRecordResponse])
def lesson_history(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lessons.lesson_history(db, lesson_id, current_user)


@router.post("/{lesson_id}/goals", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    lesson_id: int,
    data: GoalCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return goals.create_goal(
        db,
        lesson_id,
        current_user,
        title=data.title,
        description=data.description,
        estimated_lesson_count=data.estimated_lesson_count,
    )


@router.get("/{lesson_id}/goals", response_model=List[GoalResponse])
def list_goals(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return goals.list_goals_for_lesson(db, lesson_id, current_user)


@router.post("/{lesson_id}/summary", response_model=LessonSummaryResponse, status_code=status.HTTP_201_CREATED)
def create_summary(
    lesson_id: int,
    data: LessonSummaryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Only for COMPLETED lessons, once per lesson"""
    return lesson_summaries.create_lesson_summary(
        db, lesson_id, current_user, summary=data.summary, homework=data.homework
    )


@router.get("/{lesson_id}/summary", response_model=LessonSummaryResponse)
def get_summary(
    lesson_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lesson_summaries.get_lesson_summary(db, lesson_id, current_user)
