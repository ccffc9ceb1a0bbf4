import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.errors import ForbiddenError, NotFoundError
from app.models.user import User, UserRole
from app.models.base import ensure_utc, utcnow
from app.models.lesson import Lesson, LessonStatusTransition, LessonStatusValue
from app.models.goal import GoalStatusValue
from app.services.status_history import apply_transition, list_history
from app.services.transitions import lesson_machine

logger = logging.getLogger(__name__)

CLOSED_LESSON_STATUSES = (LessonStatusValue.REJECTED, LessonStatusValue.VOIDED)


def _load_lesson(db: Session, lesson_id: int, for_update: bool = False) -> Lesson:
    query = db.query(Lesson).filter(Lesson.id == lesson_id)
    if for_update:
        query = query.with_for_update()
    lesson = query.first()
    if lesson is None:
        raise NotFoundError(f"Lesson {lesson_id} not found")
    return lesson


def can_view_lesson(lesson: Lesson, actor: User) -> bool:
    return actor.role == UserRole.ADMIN or actor.id in (lesson.teacher_id, lesson.student_id)


def get_lesson(db: Session, lesson_id: int, actor: User) -> Lesson:
    lesson = _load_lesson(db, lesson_id)
    if not can_view_lesson(lesson, actor):
        raise ForbiddenError("You do not have access to this lesson")
    return lesson


def list_lessons_for_user(db: Session, actor: User) -> List[Lesson]:
    query = db.query(Lesson)
    if actor.role == UserRole.TEACHER:
        query = query.filter(Lesson.teacher_id == actor.id)
    elif actor.role == UserRole.STUDENT:
        query = query.filter(Lesson.student_id == actor.id)
    return query.order_by(Lesson.start_time, Lesson.id).all()


def transition_lesson(
    db: Session,
    lesson_id: int,
    transition,
    actor: User,
    context: Optional[Dict[str, Any]] = None,
) -> Lesson:
    """
    Apply a lesson transition.

    The lesson's teacher (or an admin) may apply any transition; the student
    may only void.
    """
    lesson = _load_lesson(db, lesson_id, for_update=True)
    if actor.role == UserRole.ADMIN or lesson.teacher_id == actor.id:
        pass
    elif lesson.student_id == actor.id:
        if getattr(transition, "value", transition) != LessonStatusTransition.VOID.value:
            raise ForbiddenError("Students can only void their lessons")
    else:
        raise ForbiddenError("You do not have access to this lesson")

    apply_transition(db, lesson, lesson_machine, transition, context)
    db.commit()
    db.refresh(lesson)
    return lesson


def lesson_history(db: Session, lesson_id: int, actor: User) -> List:
    return list_history(db, get_lesson(db, lesson_id, actor))


def teacher_statistics(db: Session, teacher_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Lesson and goal counts for one teacher.

    Earnings are the quoted cost of COMPLETED lessons. Upcoming lessons are
    those starting after now that were neither rejected nor voided.
    """
    now = ensure_utc(now) if now is not None else utcnow()
    taught = db.query(Lesson).filter(Lesson.teacher_id == teacher_id).all()

    completed = [lesson for lesson in taught if lesson.status == LessonStatusValue.COMPLETED]
    upcoming = [
        lesson for lesson in taught
        if ensure_utc(lesson.start_time) > now and lesson.status not in CLOSED_LESSON_STATUSES
    ]
    goals = [goal for lesson in taught for goal in lesson.goals]
    achieved = [goal for goal in goals if goal.status == GoalStatusValue.ACHIEVED]

    total = len(taught)
    return {
        "total_lessons": total,
        "completed_lessons": len(completed),
        "upcoming_lessons": len(upcoming),
        "total_earnings_in_cents": sum(lesson.quote.cost_in_cents for lesson in completed),
        "total_goals": len(goals),
        "completed_goals": len(achieved),
        "completion_rate": len(completed) / total * 100 if total else 0.0,
        "goals_per_lesson": len(goals) / total if total else 0.0,
        "goal_completion_rate": len(achieved) / len(goals) * 100 if goals else 0.0,
    }
