import logging
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from app.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.base import ensure_utc
from app.models.user import User, UserRole
from app.models.lesson_request import LessonRequest
from app.models.lesson_quote import LessonQuote
from app.services.teacher_rates import parse_lesson_type

logger = logging.getLogger(__name__)

MAX_DURATION_MINUTES = 480


def create_lesson_request(
    db: Session,
    student: User,
    lesson_type,
    start_time: datetime,
    duration_minutes: int,
    address: str,
) -> LessonRequest:
    if student.role != UserRole.STUDENT:
        raise ForbiddenError("Only students can request lessons")
    lesson_type = parse_lesson_type(lesson_type)
    if (
        not isinstance(duration_minutes, int)
        or isinstance(duration_minutes, bool)
        or not 0 < duration_minutes <= MAX_DURATION_MINUTES
    ):
        raise ValidationError(
            f"duration_minutes must be between 1 and {MAX_DURATION_MINUTES}"
        )
    if not address or not address.strip():
        raise ValidationError("address is required")
    if start_time is None:
        raise ValidationError("start_time is required")

    request = LessonRequest(
        student_id=student.id,
        lesson_type=lesson_type,
        start_time=ensure_utc(start_time),
        duration_minutes=duration_minutes,
        address=address.strip(),
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info(
        "Student %s requested a %s lesson (request %s)",
        student.id, lesson_type.value, request.id,
    )
    return request


def get_lesson_request(db: Session, request_id: int, actor: User) -> LessonRequest:
    """Visible to the owning student, admins, and teachers quoted on it."""
    request = db.query(LessonRequest).filter(LessonRequest.id == request_id).first()
    if request is None:
        raise NotFoundError(f"Lesson request {request_id} not found")

    if actor.role == UserRole.ADMIN or request.student_id == actor.id:
        return request
    if actor.role == UserRole.TEACHER:
        quoted = db.query(LessonQuote).filter(
            LessonQuote.lesson_request_id == request.id,
            LessonQuote.teacher_id == actor.id,
        ).first()
        if quoted is not None:
            return request
    raise ForbiddenError("You do not have access to this lesson request")


def list_lesson_requests_for_student(db: Session, student_id: int) -> List[LessonRequest]:
    return db.query(LessonRequest).filter(
        LessonRequest.student_id == student_id
    ).order_by(LessonRequest.id.desc()).all()
