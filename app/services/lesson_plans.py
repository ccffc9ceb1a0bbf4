"""
Lesson plans and milestones.

A plan is written by a teacher and optionally linked to one of their lessons
(one plan per lesson). The student of the linked lesson can read it.
Milestones hang off a plan and are managed by the plan's teacher.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.user import User, UserRole
from app.models.lesson import Lesson
from app.models.lesson_plan import LessonPlan, Milestone
from app.services.status_history import apply_transition, initialize_status
from app.services.transitions import lesson_plan_machine, milestone_machine

logger = logging.getLogger(__name__)


def _require_title(title: Optional[str]) -> str:
    if not title or not title.strip():
        raise ValidationError("title is required")
    return title.strip()


def _check_plan_owner(plan: LessonPlan, actor: User) -> None:
    if actor.role != UserRole.ADMIN and plan.teacher_id != actor.id:
        raise ForbiddenError("Only the plan's teacher can modify it")


def _can_view_plan(plan: LessonPlan, actor: User) -> bool:
    if actor.role == UserRole.ADMIN or plan.teacher_id == actor.id:
        return True
    return plan.lesson is not None and plan.lesson.student_id == actor.id


def create_lesson_plan(
    db: Session,
    teacher: User,
    title: str,
    description: Optional[str] = None,
    due_date: Optional[date] = None,
    lesson_id: Optional[int] = None,
) -> LessonPlan:
    if teacher.role != UserRole.TEACHER:
        raise ForbiddenError("Only teachers can create lesson plans")
    title = _require_title(title)

    if lesson_id is not None:
        lesson = db.query(Lesson).filter(Lesson.id == lesson_id).first()
        if lesson is None:
            raise NotFoundError(f"Lesson {lesson_id} not found")
        if lesson.teacher_id != teacher.id:
            raise ForbiddenError("You can only plan your own lessons")
        if db.query(LessonPlan).filter(LessonPlan.lesson_id == lesson_id).first() is not None:
            raise ConflictError(f"Lesson {lesson_id} already has a lesson plan")

    plan = LessonPlan(
        teacher_id=teacher.id,
        lesson_id=lesson_id,
        title=title,
        description=description,
        due_date=due_date,
    )
    try:
        db.add(plan)
        db.flush()
        initialize_status(db, plan, lesson_plan_machine)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Lesson {lesson_id} already has a lesson plan")

    db.refresh(plan)
    logger.info("Lesson plan %s created by teacher %s", plan.id, teacher.id)
    return plan


def get_lesson_plan(db: Session, plan_id: int, actor: User) -> LessonPlan:
    plan = db.query(LessonPlan).filter(LessonPlan.id == plan_id).first()
    if plan is None:
        raise NotFoundError(f"Lesson plan {plan_id} not found")
    if not _can_view_plan(plan, actor):
        raise ForbiddenError("You do not have access to this lesson plan")
    return plan


def list_lesson_plans(db: Session, actor: User) -> List[LessonPlan]:
    query = db.query(LessonPlan)
    if actor.role == UserRole.TEACHER:
        query = query.filter(LessonPlan.teacher_id == actor.id)
    elif actor.role == UserRole.STUDENT:
        query = query.join(Lesson, LessonPlan.lesson_id == Lesson.id).filter(
            Lesson.student_id == actor.id
        )
    return query.order_by(LessonPlan.id).all()


def transition_lesson_plan(
    db: Session,
    plan_id: int,
    transition,
    actor: User,
    context: Optional[Dict[str, Any]] = None,
) -> LessonPlan:
    plan = db.query(LessonPlan).filter(LessonPlan.id == plan_id).with_for_update().first()
    if plan is None:
        raise NotFoundError(f"Lesson plan {plan_id} not found")
    _check_plan_owner(plan, actor)

    apply_transition(db, plan, lesson_plan_machine, transition, context)
    db.commit()
    db.refresh(plan)
    return plan


def create_milestone(
    db: Session,
    plan_id: int,
    actor: User,
    title: str,
    description: Optional[str] = None,
    due_date: Optional[date] = None,
) -> Milestone:
    plan = db.query(LessonPlan).filter(LessonPlan.id == plan_id).first()
    if plan is None:
        raise NotFoundError(f"Lesson plan {plan_id} not found")
    _check_plan_owner(plan, actor)

    milestone = Milestone(
        lesson_plan_id=plan.id,
        title=_require_title(title),
        description=description,
        due_date=due_date,
    )
    db.add(milestone)
    db.flush()
    initialize_status(db, milestone, milestone_machine)
    db.commit()
    db.refresh(milestone)
    return milestone


def list_milestones(db: Session, plan_id: int, actor: User) -> List[Milestone]:
    plan = get_lesson_plan(db, plan_id, actor)
    return db.query(Milestone).filter(Milestone.lesson_plan_id == plan.id).order_by(Milestone.id).all()


def transition_milestone(
    db: Session,
    milestone_id: int,
    transition,
    actor: User,
    context: Optional[Dict[str, Any]] = None,
) -> Milestone:
    milestone = db.query(Milestone).filter(Milestone.id == milestone_id).with_for_update().first()
    if milestone is None:
        raise NotFoundError(f"Milestone {milestone_id} not found")
    _check_plan_owner(milestone.lesson_plan, actor)

    apply_transition(db, milestone, milestone_machine, transition, context)
    db.commit()
    db.refresh(milestone)
    return milestone
