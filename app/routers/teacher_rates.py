from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, UserRole
from app.models.lesson_request import LessonType
from app.auth.dependencies import get_current_user, require_teacher
from app.schemas.common import StatusRecordResponse, TransitionRequest
from app.schemas.teacher_rates import RateChange, RateCreate, RateResponse
from app.services import teacher_rates as rate_service
from app.services.status_history import list_history
from app.errors import ForbiddenError

router = APIRouter(prefix="/teacher-rates", tags=["Teacher Rates"])


@router.get("", response_model=List[RateResponse])
def list_my_rates(
    lesson_type: Optional[LessonType] = None,
    active_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    return rate_service.list_rates(db, current_user.id, lesson_type=lesson_type, active_only=active_only)


@router.post("", response_model=RateResponse, status_code=status.HTTP_201_CREATED)
def create_rate(
    data: RateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    return rate_service.create_rate(db, current_user, data.lesson_type, data.rate_in_cents)


@router.put("/{lesson_type}", response_model=RateResponse)
def change_rate(
    lesson_type: LessonType,
    data: RateChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_teacher),
):
    """Replace the active rate for lesson_type; the old row is kept as INACTIVE"""
    return rate_service.change_rate(db, current_user, lesson_type, data.rate_in_cents)


@router.post("/{rate_id}/transitions", response_model=RateResponse)
def transition_rate(
    rate_id: int,
    data: TransitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return rate_service.transition_rate(db, rate_id, data.transition, current_user, data.context)


@router.get("/{rate_id}/history", response_model=List[StatusRecordResponse])
def rate_history(
    rate_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rate = rate_service.get_rate(db, rate_id)
    if current_user.role != UserRole.ADMIN and rate.teacher_id != current_user.id:
        raise ForbiddenError("You can only view your own rates")
    return list_history(db, rate)
