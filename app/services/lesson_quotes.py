"""
Quote generation and acceptance.

Flow: a student's lesson request fans out to quotes from teachers holding an
ACTIVE rate for the lesson type. The student accepts exactly one quote, which
moves it to ACCEPTED and creates the Lesson in the same transaction.

Sibling quotes stay CREATED after an acceptance. They can still be rejected
but no longer accepted, since a lesson already exists for the request.
Expired CREATED quotes are rejected by expire_stale_quotes (Celery beat).
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import ConflictError, ForbiddenError, InvalidTransitionError, NotFoundError
from app.models.base import ensure_utc, utcnow
from app.models.user import User, UserRole
from app.models.lesson_request import LessonRequest
from app.models.lesson_quote import (
    LessonQuote,
    LessonQuoteStatus,
    LessonQuoteStatusValue,
    LessonQuoteStatusTransition,
)
from app.models.lesson import Lesson
from app.services.pricing import calculate_cost_in_cents
from app.services.status_history import apply_transition, initialize_status
from app.services.teacher_rates import find_teachers_with_active_rate, get_active_rate
from app.services.transitions import lesson_machine, lesson_quote_machine

logger = logging.getLogger(__name__)

EXPIRED_CONTEXT = {"reason": "expired"}


def _resolve_now(now: Optional[datetime]) -> datetime:
    return ensure_utc(now) if now is not None else utcnow()


def _get_quote(db: Session, quote_id: int) -> LessonQuote:
    quote = db.query(LessonQuote).filter(LessonQuote.id == quote_id).first()
    if quote is None:
        raise NotFoundError(f"Lesson quote {quote_id} not found")
    return quote


def _lesson_for_request(db: Session, lesson_request_id: int) -> Optional[Lesson]:
    return db.query(Lesson).filter(Lesson.lesson_request_id == lesson_request_id).first()


def _explicit_teachers(db: Session, teacher_ids: Iterable[int]) -> List[User]:
    """Resolve ids to teachers, dropping duplicates and anything that isn't a teacher."""
    teachers = []
    seen = set()
    for teacher_id in teacher_ids:
        if teacher_id in seen:
            continue
        seen.add(teacher_id)
        teacher = db.query(User).filter(User.id == teacher_id).first()
        if teacher is None or teacher.role != UserRole.TEACHER:
            logger.info("Skipping quote candidate %s: not a teacher", teacher_id)
            continue
        teachers.append(teacher)
    return teachers


def get_quote(db: Session, quote_id: int, actor: User) -> LessonQuote:
    """Visible to the requesting student, the quoting teacher, and admins."""
    quote = _get_quote(db, quote_id)
    if actor.role == UserRole.ADMIN:
        return quote
    if quote.teacher_id == actor.id or quote.lesson_request.student_id == actor.id:
        return quote
    raise ForbiddenError("You do not have access to this quote")


def list_quotes_for_request(db: Session, lesson_request_id: int, actor: User) -> List[LessonQuote]:
    request = db.query(LessonRequest).filter(LessonRequest.id == lesson_request_id).first()
    if request is None:
        raise NotFoundError(f"Lesson request {lesson_request_id} not found")

    query = db.query(LessonQuote).filter(LessonQuote.lesson_request_id == request.id)
    if actor.role == UserRole.ADMIN or request.student_id == actor.id:
        pass
    elif actor.role == UserRole.TEACHER:
        query = query.filter(LessonQuote.teacher_id == actor.id)
    else:
        raise ForbiddenError("You do not have access to this lesson request")
    return query.order_by(LessonQuote.id).all()


def generate_quotes(
    db: Session,
    lesson_request_id: int,
    actor: User,
    teacher_ids: Optional[List[int]] = None,
    now: Optional[datetime] = None,
) -> List[LessonQuote]:
    """
    Create one CREATED quote per eligible teacher.

    Eligible means: a teacher, holding an ACTIVE rate for the request's lesson
    type, without an open quote on this request already. Without explicit
    teacher_ids, up to settings.quote_teacher_limit teachers are picked.
    Returns the new quotes, possibly none.
    """
    request = db.query(LessonRequest).filter(
        LessonRequest.id == lesson_request_id
    ).with_for_update().first()
    if request is None:
        raise NotFoundError(f"Lesson request {lesson_request_id} not found")
    if actor.role != UserRole.ADMIN and request.student_id != actor.id:
        raise ForbiddenError("You can only request quotes for your own lesson requests")
    if _lesson_for_request(db, request.id) is not None:
        raise ConflictError(
            f"Lesson request {request.id} already has a lesson; no new quotes can be generated"
        )

    now = _resolve_now(now)
    if teacher_ids is None:
        candidates = find_teachers_with_active_rate(
            db, request.lesson_type, limit=settings.quote_teacher_limit
        )
    else:
        candidates = _explicit_teachers(db, teacher_ids)

    open_quote_teachers = {
        quote.teacher_id
        for quote in db.query(LessonQuote).filter(LessonQuote.lesson_request_id == request.id).all()
        if quote.status == LessonQuoteStatusValue.CREATED
    }

    quotes = []
    for teacher in candidates:
        if teacher.id in open_quote_teachers:
            logger.info("Teacher %s already has an open quote on request %s", teacher.id, request.id)
            continue

        rate = get_active_rate(db, teacher.id, request.lesson_type)
        if rate is None:
            logger.info(
                "Teacher %s has no active %s rate, skipping",
                teacher.id, request.lesson_type.value,
            )
            continue

        cost = calculate_cost_in_cents(rate.rate_in_cents, request.duration_minutes)
        if cost is None:
            logger.warning(
                "Could not price request %s with rate %s, skipping teacher %s",
                request.id, rate.id, teacher.id,
            )
            continue

        quote = LessonQuote(
            lesson_request_id=request.id,
            teacher_id=teacher.id,
            cost_in_cents=cost,
            hourly_rate_in_cents=rate.rate_in_cents,
            created_at=now,
            expires_at=now + timedelta(hours=settings.quote_expiry_hours),
        )
        db.add(quote)
        db.flush()
        initialize_status(db, quote, lesson_quote_machine, {"rate_id": rate.id})
        open_quote_teachers.add(teacher.id)
        quotes.append(quote)

    db.commit()
    for quote in quotes:
        db.refresh(quote)
    logger.info("Generated %d quotes for lesson request %s", len(quotes), request.id)
    return quotes


def accept_quote(
    db: Session,
    quote_id: int,
    actor: User,
    context: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Tuple[LessonQuote, Lesson]:
    """Accept a quote and create its lesson atomically."""
    quote = _get_quote(db, quote_id)
    request = quote.lesson_request
    if request.student_id != actor.id:
        raise ForbiddenError("Only the student who requested the lesson can accept its quotes")
    request_id = request.id

    # request row serializes sibling acceptances; quote row serializes
    # with reject_quote and the expiry sweep
    db.refresh(request, with_for_update=True)
    db.refresh(quote, with_for_update=True)

    now = _resolve_now(now)
    if quote.status != LessonQuoteStatusValue.CREATED:
        raise ConflictError(
            f"Quote {quote.id} is {quote.status.value}; only CREATED quotes can be accepted"
        )
    if now >= ensure_utc(quote.expires_at):
        raise ConflictError(f"Quote {quote.id} expired at {ensure_utc(quote.expires_at).isoformat()}")
    if _lesson_for_request(db, request.id) is not None:
        raise ConflictError(f"Another quote was already accepted for lesson request {request.id}")

    try:
        apply_transition(db, quote, lesson_quote_machine, LessonQuoteStatusTransition.ACCEPT, context)
        lesson = Lesson(
            quote_id=quote.id,
            lesson_request_id=request.id,
            teacher_id=quote.teacher_id,
            student_id=request.student_id,
            lesson_type=request.lesson_type,
            start_time=request.start_time,
            duration_minutes=request.duration_minutes,
            address=request.address,
        )
        db.add(lesson)
        db.flush()
        initialize_status(db, lesson, lesson_machine, {"quote_id": quote.id})
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Lost acceptance race on lesson request %s (quote %s)", request_id, quote_id)
        raise ConflictError(f"Another quote was already accepted for lesson request {request_id}")

    db.refresh(quote)
    db.refresh(lesson)
    logger.info("Quote %s accepted, lesson %s created", quote.id, lesson.id)
    return quote, lesson


def reject_quote(
    db: Session,
    quote_id: int,
    actor: User,
    context: Optional[Dict[str, Any]] = None,
) -> LessonQuote:
    quote = _get_quote(db, quote_id)
    if actor.role != UserRole.ADMIN and quote.lesson_request.student_id != actor.id:
        raise ForbiddenError("Only the student who requested the lesson can reject its quotes")

    db.refresh(quote, with_for_update=True)
    apply_transition(db, quote, lesson_quote_machine, LessonQuoteStatusTransition.REJECT, context)
    db.commit()
    db.refresh(quote)
    return quote


def transition_quote(
    db: Session,
    quote_id: int,
    transition,
    actor: User,
    context: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> Tuple[LessonQuote, Optional[Lesson]]:
    """Dispatch ACCEPT / REJECT. Returns (quote, lesson); lesson is None unless accepted."""
    try:
        action = LessonQuoteStatusTransition(transition)
    except ValueError:
        action = None

    if action == LessonQuoteStatusTransition.ACCEPT:
        return accept_quote(db, quote_id, actor, context=context, now=now)
    if action == LessonQuoteStatusTransition.REJECT:
        return reject_quote(db, quote_id, actor, context=context), None

    quote = _get_quote(db, quote_id)
    raise InvalidTransitionError(lesson_quote_machine.name, quote.status, transition)


def expire_stale_quotes(db: Session, now: Optional[datetime] = None) -> int:
    """Reject every CREATED quote past its expiry. Returns how many were rejected."""
    now = _resolve_now(now)
    stale = db.query(LessonQuote).join(
        LessonQuoteStatus, LessonQuote.current_status_id == LessonQuoteStatus.id
    ).filter(
        LessonQuoteStatus.status == LessonQuoteStatusValue.CREATED,
        LessonQuote.expires_at <= now,
    ).order_by(LessonQuote.id).with_for_update(skip_locked=True).all()

    for quote in stale:
        apply_transition(
            db, quote, lesson_quote_machine, LessonQuoteStatusTransition.REJECT, dict(EXPIRED_CONTEXT)
        )
    db.commit()

    if stale:
        logger.info("Expired %d stale quotes", len(stale))
    return len(stale)
