from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.auth.dependencies import get_current_user
from app.schemas.common import StatusRecordResponse, TransitionRequest
from app.schemas.lessons import GoalResponse
from app.services import goals

router = APIRouter(prefix="/goals", tags=["Goals"])


@router.get("/{goal_id}", response_model=GoalResponse)
def get_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return goals.get_goal(db, goal_id, current_user)


@router.post("/{goal_id}/transitions", response_model=GoalResponse)
def transition_goal(
    goal_id: int,
    data: TransitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return goals.transition_goal(db, goal_id, data.transition, current_user, data.context)


@router.get("/{goal_id}/history", response_model=List[StatusRecordResponse])
def goal_history(
    goal_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return goals.goal_history(db, goal_id, current_user)
