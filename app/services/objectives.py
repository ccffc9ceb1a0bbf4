"""
Student learning objectives. Owned by the student; not tied to a lesson.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.user import User, UserRole
from app.models.objective import Objective
from app.services.status_history import apply_transition, initialize_status
from app.services.teacher_rates import parse_lesson_type
from app.services.transitions import objective_machine

logger = logging.getLogger(__name__)


def create_objective(
    db: Session,
    student: User,
    lesson_type,
    title: str,
    description: Optional[str] = None,
    target_date: Optional[date] = None,
) -> Objective:
    if student.role != UserRole.STUDENT:
        raise ForbiddenError("Only students can create objectives")
    lesson_type = parse_lesson_type(lesson_type)
    if not title or not title.strip():
        raise ValidationError("title is required")

    objective = Objective(
        student_id=student.id,
        lesson_type=lesson_type,
        title=title.strip(),
        description=description,
        target_date=target_date,
    )
    db.add(objective)
    db.flush()
    initialize_status(db, objective, objective_machine)
    db.commit()
    db.refresh(objective)
    logger.info("Objective %s created by student %s", objective.id, student.id)
    return objective


def get_objective(db: Session, objective_id: int, actor: User) -> Objective:
    objective = db.query(Objective).filter(Objective.id == objective_id).first()
    if objective is None:
        raise NotFoundError(f"Objective {objective_id} not found")
    if actor.role != UserRole.ADMIN and objective.student_id != actor.id:
        raise ForbiddenError("You do not have access to this objective")
    return objective


def list_objectives(db: Session, actor: User, lesson_type=None) -> List[Objective]:
    query = db.query(Objective)
    if actor.role != UserRole.ADMIN:
        query = query.filter(Objective.student_id == actor.id)
    if lesson_type is not None:
        query = query.filter(Objective.lesson_type == parse_lesson_type(lesson_type))
    return query.order_by(Objective.id).all()


def transition_objective(
    db: Session,
    objective_id: int,
    transition,
    actor: User,
    context: Optional[Dict[str, Any]] = None,
) -> Objective:
    objective = db.query(Objective).filter(Objective.id == objective_id).with_for_update().first()
    if objective is None:
        raise NotFoundError(f"Objective {objective_id} not found")
    if actor.role != UserRole.ADMIN and objective.student_id != actor.id:
        raise ForbiddenError("You can only update your own objectives")

    apply_transition(db, objective, objective_machine, transition, context)
    db.commit()
    db.refresh(objective)
    return objective
