"""
Teacher hourly rates.

A rate row is immutable once written: price changes deactivate the current
row and insert a new ACTIVE one. Every path that can produce an ACTIVE rate
locks the teacher's user row first, so two requests cannot both end up with
an active rate for the same lesson type.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.user import User, UserRole
from app.models.lesson_request import LessonType
from app.models.teacher_rate import (
    TeacherLessonHourlyRate,
    TeacherLessonHourlyRateStatus,
    TeacherLessonHourlyRateStatusValue,
)
from app.services.status_history import apply_transition, initialize_status
from app.services.transitions import teacher_rate_machine

logger = logging.getLogger(__name__)


def parse_lesson_type(value) -> LessonType:
    try:
        return LessonType(value)
    except ValueError:
        raise ValidationError(f"Unknown lesson type: {value}")


def _validate_rate(rate_in_cents) -> None:
    if not isinstance(rate_in_cents, int) or isinstance(rate_in_cents, bool) or rate_in_cents <= 0:
        raise ValidationError("rate_in_cents must be a positive integer")


def _lock_teacher(db: Session, teacher_id: int) -> User:
    teacher = db.query(User).filter(User.id == teacher_id).with_for_update().first()
    if teacher is None:
        raise NotFoundError(f"Teacher {teacher_id} not found")
    return teacher


def _active_rates_query(db: Session):
    return db.query(TeacherLessonHourlyRate).join(
        TeacherLessonHourlyRateStatus,
        TeacherLessonHourlyRate.current_status_id == TeacherLessonHourlyRateStatus.id,
    ).filter(TeacherLessonHourlyRateStatus.status == TeacherLessonHourlyRateStatusValue.ACTIVE)


def get_active_rate(db: Session, teacher_id: int, lesson_type) -> Optional[TeacherLessonHourlyRate]:
    return _active_rates_query(db).filter(
        TeacherLessonHourlyRate.teacher_id == teacher_id,
        TeacherLessonHourlyRate.lesson_type == parse_lesson_type(lesson_type),
    ).order_by(TeacherLessonHourlyRate.id.desc()).first()


def get_rate(db: Session, rate_id: int) -> TeacherLessonHourlyRate:
    rate = db.query(TeacherLessonHourlyRate).filter(TeacherLessonHourlyRate.id == rate_id).first()
    if rate is None:
        raise NotFoundError(f"Rate {rate_id} not found")
    return rate


def list_rates(
    db: Session,
    teacher_id: int,
    lesson_type=None,
    active_only: bool = False,
) -> List[TeacherLessonHourlyRate]:
    query = _active_rates_query(db) if active_only else db.query(TeacherLessonHourlyRate)
    query = query.filter(TeacherLessonHourlyRate.teacher_id == teacher_id)
    if lesson_type is not None:
        query = query.filter(TeacherLessonHourlyRate.lesson_type == parse_lesson_type(lesson_type))
    return query.order_by(TeacherLessonHourlyRate.id).all()


def find_teachers_with_active_rate(db: Session, lesson_type, limit: Optional[int] = None) -> List[User]:
    """Teachers holding an ACTIVE rate for lesson_type, oldest accounts first."""
    query = db.query(User).join(
        TeacherLessonHourlyRate, TeacherLessonHourlyRate.teacher_id == User.id
    ).join(
        TeacherLessonHourlyRateStatus,
        TeacherLessonHourlyRate.current_status_id == TeacherLessonHourlyRateStatus.id,
    ).filter(
        User.role == UserRole.TEACHER,
        TeacherLessonHourlyRate.lesson_type == parse_lesson_type(lesson_type),
        TeacherLessonHourlyRateStatus.status == TeacherLessonHourlyRateStatusValue.ACTIVE,
    ).order_by(User.id)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def _insert_rate(
    db: Session,
    teacher: User,
    lesson_type: LessonType,
    rate_in_cents: int,
    context: Optional[Dict[str, Any]] = None,
) -> TeacherLessonHourlyRate:
    rate = TeacherLessonHourlyRate(
        teacher_id=teacher.id,
        lesson_type=lesson_type,
        rate_in_cents=rate_in_cents,
    )
    db.add(rate)
    db.flush()
    initialize_status(db, rate, teacher_rate_machine, context)
    return rate


def create_rate(db: Session, teacher: User, lesson_type, rate_in_cents: int) -> TeacherLessonHourlyRate:
    lesson_type = parse_lesson_type(lesson_type)
    _validate_rate(rate_in_cents)
    if teacher.role != UserRole.TEACHER:
        raise ForbiddenError("Only teachers can set lesson rates")

    _lock_teacher(db, teacher.id)
    if get_active_rate(db, teacher.id, lesson_type) is not None:
        raise ConflictError(
            f"An active {lesson_type.value} rate already exists; change it instead"
        )

    rate = _insert_rate(db, teacher, lesson_type, rate_in_cents)
    db.commit()
    db.refresh(rate)
    logger.info(
        "Teacher %s set %s rate to %s cents (rate %s)",
        teacher.id, lesson_type.value, rate_in_cents, rate.id,
    )
    return rate


def change_rate(db: Session, teacher: User, lesson_type, rate_in_cents: int) -> TeacherLessonHourlyRate:
    """Replace the active rate for lesson_type with a new ACTIVE row."""
    lesson_type = parse_lesson_type(lesson_type)
    _validate_rate(rate_in_cents)
    if teacher.role != UserRole.TEACHER:
        raise ForbiddenError("Only teachers can set lesson rates")

    _lock_teacher(db, teacher.id)
    previous = get_active_rate(db, teacher.id, lesson_type)
    context = None
    if previous is not None:
        apply_transition(
            db, previous, teacher_rate_machine, "DEACTIVATE",
            {"replaced_by_rate_in_cents": rate_in_cents},
        )
        context = {"replaces_rate_id": previous.id}

    rate = _insert_rate(db, teacher, lesson_type, rate_in_cents, context)
    db.commit()
    db.refresh(rate)
    logger.info(
        "Teacher %s changed %s rate to %s cents (rate %s, previous %s)",
        teacher.id, lesson_type.value, rate_in_cents, rate.id,
        previous.id if previous is not None else None,
    )
    return rate


def transition_rate(
    db: Session,
    rate_id: int,
    transition,
    actor: User,
    context: Optional[Dict[str, Any]] = None,
) -> TeacherLessonHourlyRate:
    rate = get_rate(db, rate_id)
    if actor.role != UserRole.ADMIN and rate.teacher_id != actor.id:
        raise ForbiddenError("You can only manage your own rates")

    # teacher row first, then the rate: same lock order as create/change
    _lock_teacher(db, rate.teacher_id)
    db.refresh(rate, with_for_update=True)

    target = teacher_rate_machine.get_resulting_status(rate.status, transition)
    if target == TeacherLessonHourlyRateStatusValue.ACTIVE:
        other = get_active_rate(db, rate.teacher_id, rate.lesson_type)
        if other is not None and other.id != rate.id:
            raise ConflictError(
                f"Rate {other.id} is already active for {rate.lesson_type.value}"
            )

    apply_transition(db, rate, teacher_rate_machine, transition, context)
    db.commit()
    db.refresh(rate)
    return rate
