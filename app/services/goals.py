import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.user import User, UserRole
from app.models.goal import Goal
from app.models.lesson import Lesson
from app.services.lessons import can_view_lesson, get_lesson
from app.services.status_history import apply_transition, initialize_status, list_history
from app.services.transitions import goal_machine

logger = logging.getLogger(__name__)


def _check_goal_owner(lesson: Lesson, actor: User) -> None:
    if actor.role != UserRole.ADMIN and lesson.teacher_id != actor.id:
        raise ForbiddenError("Only the lesson's teacher can manage its goals")


def create_goal(
    db: Session,
    lesson_id: int,
    actor: User,
    title: str,
    description: Optional[str] = None,
    estimated_lesson_count: Optional[int] = None,
) -> Goal:
    lesson = db.query(Lesson).filter(Lesson.id == lesson_id).first()
    if lesson is None:
        raise NotFoundError(f"Lesson {lesson_id} not found")
    _check_goal_owner(lesson, actor)
    if not title or not title.strip():
        raise ValidationError("title is required")
    if estimated_lesson_count is not None and estimated_lesson_count < 1:
        raise ValidationError("estimated_lesson_count must be at least 1")

    goal = Goal(
        lesson_id=lesson.id,
        title=title.strip(),
        description=description,
        estimated_lesson_count=estimated_lesson_count,
    )
    db.add(goal)
    db.flush()
    initialize_status(db, goal, goal_machine)
    db.commit()
    db.refresh(goal)
    logger.info("Goal %s created on lesson %s by user %s", goal.id, lesson.id, actor.id)
    return goal


def get_goal(db: Session, goal_id: int, actor: User) -> Goal:
    goal = db.query(Goal).filter(Goal.id == goal_id).first()
    if goal is None:
        raise NotFoundError(f"Goal {goal_id} not found")
    if not can_view_lesson(goal.lesson, actor):
        raise ForbiddenError("You do not have access to this goal")
    return goal


def list_goals_for_lesson(db: Session, lesson_id: int, actor: User) -> List[Goal]:
    lesson = get_lesson(db, lesson_id, actor)
    return db.query(Goal).filter(Goal.lesson_id == lesson.id).order_by(Goal.id).all()


def transition_goal(
    db: Session,
    goal_id: int,
    transition,
    actor: User,
    context: Optional[Dict[str, Any]] = None,
) -> Goal:
    goal = db.query(Goal).filter(Goal.id == goal_id).with_for_update().first()
    if goal is None:
        raise NotFoundError(f"Goal {goal_id} not found")
    _check_goal_owner(goal.lesson, actor)

    apply_transition(db, goal, goal_machine, transition, context)
    db.commit()
    db.refresh(goal)
    return goal


def goal_history(db: Session, goal_id: int, actor: User) -> List:
    return list_history(db, get_goal(db, goal_id, actor))
