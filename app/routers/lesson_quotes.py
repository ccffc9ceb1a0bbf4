from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.auth.dependencies import get_current_user
from app.schemas.common import StatusRecordResponse, TransitionRequest
from app.schemas.lessons import LessonQuoteResponse, QuoteTransitionResponse
from app.services import lesson_quotes
from app.services.status_history import list_history

router = APIRouter(prefix="/lesson-quotes", tags=["Lesson Quotes"])


@router.get("/{quote_id}", response_model=LessonQuoteResponse)
def get_quote(
    quote_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return lesson_quotes.get_quote(db, quote_id, current_user)


@router.post("/{quote_id}/transitions", response_model=QuoteTransitionResponse)
def transition_quote(
    quote_id: int,
    data: TransitionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """ACCEPT also returns the lesson it created"""
    quote, lesson = lesson_quotes.transition_quote(
        db, quote_id, data.transition, current_user, context=data.context
    )
    return {"quote": quote, "lesson": lesson}


@router.get("/{quote_id}/history", response_model=List[StatusRecordResponse])
def quote_history(
    quote_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return list_history(db, lesson_quotes.get_quote(db, quote_id, current_user))
