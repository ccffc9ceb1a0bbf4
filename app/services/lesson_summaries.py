"""
Lesson summaries.

The lesson's teacher writes one summary and homework once the lesson has
reached COMPLETED. Summaries are not status tracked; voiding the lesson later
leaves its summary in place.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.user import User, UserRole
from app.models.lesson import Lesson, LessonStatusValue
from app.models.lesson_summary import LessonSummary
from app.services.lessons import get_lesson

logger = logging.getLogger(__name__)

SUMMARY_LENGTH = (10, 5000)
HOMEWORK_LENGTH = (5, 2000)


def _check_length(field: str, value, bounds) -> str:
    low, high = bounds
    text = value.strip() if isinstance(value, str) else ""
    if not low <= len(text) <= high:
        raise ValidationError(f"{field} must be between {low} and {high} characters")
    return text


def create_lesson_summary(
    db: Session,
    lesson_id: int,
    actor: User,
    summary: str,
    homework: str,
) -> LessonSummary:
    summary = _check_length("summary", summary, SUMMARY_LENGTH)
    homework = _check_length("homework", homework, HOMEWORK_LENGTH)

    lesson = db.query(Lesson).filter(Lesson.id == lesson_id).with_for_update().first()
    if lesson is None:
        raise NotFoundError(f"Lesson {lesson_id} not found")
    if actor.role != UserRole.ADMIN and lesson.teacher_id != actor.id:
        raise ForbiddenError("Only the lesson's teacher can write its summary")
    if lesson.status != LessonStatusValue.COMPLETED:
        raise ConflictError(f"Summaries can only be written for COMPLETED lessons; lesson {lesson.id} is not")
    if lesson.summary is not None:
        raise ConflictError(f"Lesson {lesson.id} already has a summary")

    record = LessonSummary(lesson_id=lesson.id, summary=summary, homework=homework)
    try:
        db.add(record)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"Lesson {lesson_id} already has a summary")

    db.refresh(record)
    logger.info("Summary %s written for lesson %s by user %s", record.id, lesson_id, actor.id)
    return record


def get_lesson_summary(db: Session, lesson_id: int, actor: User) -> LessonSummary:
    """Visible to whoever can see the lesson."""
    lesson = get_lesson(db, lesson_id, actor)
    if lesson.summary is None:
        raise NotFoundError(f"Lesson {lesson_id} has no summary")
    return lesson.summary
