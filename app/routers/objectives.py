from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.models.lesson_request import LessonType
from app.auth.dependencies import get_current_user, require_student
from app.schemas.common import TransitionRequest
from app.schemas.lessons import ObjectiveCreate, ObjectiveResponse
from app.services import objectives

router = APIRouter(prefix="/objectives", tags=["Objectives"])


@router.post("", response_model=ObjectiveResponse, status_code=status.HTTP_201_CREATED)
def create_objective(
    data: ObjectiveCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    return objectives.create_objective(
        db,
        current_user,
        lesson_type=data.lesson_type,
        title=data.title,
        description=data.description,
        target_date=data.target_date,
    )


@router.get("", response_model=List[ObjectiveResponse])
def list_objectives(
    lesson_type: Optional[LessonType] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return objectives.list_objectives(db, current_user, lesson_type=lesson_type)


@router.post("/{objective_id}/transitions", response_model=ObjectiveResponse)
def transition_objective(
    objective_id: int,
    data: TransitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return objectives.transition_objective(db, objective_id, data.transition, current_user, data.context)
