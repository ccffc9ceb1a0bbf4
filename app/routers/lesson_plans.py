from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.auth.dependencies import get_current_user, require_teacher
from app.schemas.common import TransitionRequest
from app.schemas.lesson_plans import (
    LessonPlanCreate,
    LessonPlanResponse,
    MilestoneCreate,
    MilestoneResponse,
)
from app.services import lesson_plans

router = APIRouter(prefix="/lesson-plans", tags=["Lesson Plans"])
milestones_router = APIRouter(prefix="/milestones", tags=["Lesson Plans"])


@router.post("", response_model=LessonPlanResponse, status_code=status.HTTP_201_CREATED)
def create_lesson_plan(
    data: LessonPlanCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    return lesson_plans.create_lesson_plan(
        db,
        current_user,
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        lesson_id=data.lesson_id,
    )


@router.get("", response_model=List[LessonPlanResponse])
def list_lesson_plans(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lesson_plans.list_lesson_plans(db, current_user)


@router.get("/{plan_id}", response_model=LessonPlanResponse)
def get_lesson_plan(
    plan_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lesson_plans.get_lesson_plan(db, plan_id, current_user)


@router.post("/{plan_id}/transitions", response_model=LessonPlanResponse)
def transition_lesson_plan(
    plan_id: int,
    data: TransitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lesson_plans.transition_lesson_plan(db, plan_id, data.transition, current_user, data.context)


@router.post(
    "/{plan_id}/milestones",
    response_model=MilestoneResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_milestone(
    plan_id: int,
    data: MilestoneCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lesson_plans.create_milestone(
        db,
        plan_id,
        current_user,
        title=data.title,
        description=data.description,
        due_date=data.due_date,
    )


@router.get("/{plan_id}/milestones", response_model=List[MilestoneResponse])
def list_milestones(
    plan_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lesson_plans.list_milestones(db, plan_id, current_user)


@milestones_router.post("/{milestone_id}/transitions", response_model=MilestoneResponse)
def transition_milestone(
    milestone_id: int,
    data: TransitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lesson_plans.transition_milestone(db, milestone_id, data.transition, current_user, data.context)
