"""
Lesson requests and their quotes.

Creating a request fans out quotes immediately unless generate_quotes=false;
quotes can be (re)generated later through POST /{id}/quotes.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, UserRole
from app.auth.dependencies import get_current_user, require_student
from app.schemas.lessons import (
    GenerateQuotesRequest,
    LessonQuoteResponse,
    LessonRequestCreate,
    LessonRequestResponse,
    LessonRequestWithQuotes,
)
from app.services import lesson_quotes, lesson_requests

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lesson-requests", tags=["Lesson Requests"])


@router.post("", response_model=LessonRequestWithQuotes, status_code=status.HTTP_201_CREATED)
def create_lesson_request(
    data: LessonRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    request = lesson_requests.create_lesson_request(
        db,
        current_user,
        lesson_type=data.lesson_type,
        start_time=data.start_time,
        duration_minutes=data.duration_minutes,
        address=data.address,
    )
    if data.generate_quotes:
        lesson_quotes.generate_quotes(db, request.id, current_user)
    return request


@router.get("", response_model=List[LessonRequestResponse])
def list_my_lesson_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_student),
):
    return lesson_requests.list_lesson_requests_for_student(db, current_user.id)


@router.get("/{request_id}", response_model=LessonRequestWithQuotes)
def get_lesson_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    request = lesson_requests.get_lesson_request(db, request_id, current_user)
    response = LessonRequestWithQuotes.model_validate(request)
    if current_user.role == UserRole.TEACHER and request.student_id != current_user.id:
        response.quotes = [q for q in response.quotes if q.teacher_id == current_user.id]
    return response


@router.post(
    "/{request_id}/quotes",
    response_model=List[LessonQuoteResponse],
    status_code=status.HTTP_201_CREATED,
)
def generate_quotes(
    request_id: int,
    data: Optional[GenerateQuotesRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    teacher_ids = data.teacher_ids if data is not None else None
    return lesson_quotes.generate_quotes(db, request_id, current_user, teacher_ids=teacher_ids)


@router.get("/{request_id}/quotes", response_model=List[LessonQuoteResponse])
def list_quotes(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lesson_quotes.list_quotes_for_request(db, request_id, current_user)
