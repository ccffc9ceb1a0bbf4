import enum
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, JSONType, StatusTrackedMixin, utcnow


class LessonQuoteStatusValue(str, enum.Enum):
    CREATED = "CREATED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class LessonQuoteStatusTransition(str, enum.Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


class LessonQuoteStatus(Base):
    __tablename__ = "lesson_quote_statuses"

    id = Column(Integer, primary_key=True, index=True)
    lesson_quote_id = Column(Integer, ForeignKey("lesson_quotes.id"), nullable=False, index=True)
    status = Column(Enum(LessonQuoteStatusValue, name="lesson_quote_status_value"), nullable=False)
    context = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    lesson_quote = relationship("LessonQuote", foreign_keys=[lesson_quote_id], back_populates="status_history")


class LessonQuote(StatusTrackedMixin, Base):
    """A teacher's priced offer for a lesson request"""
    __tablename__ = "lesson_quotes"

    status_record_class = LessonQuoteStatus
    status_parent_field = "lesson_quote_id"

    id = Column(Integer, primary_key=True, index=True)
    lesson_request_id = Column(Integer, ForeignKey("lesson_requests.id"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    cost_in_cents = Column(Integer, nullable=False)
    hourly_rate_in_cents = Column(Integer, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    current_status_id = Column(
        Integer,
        ForeignKey("lesson_quote_statuses.id", use_alter=True, name="fk_lesson_quotes_current_status"),
        nullable=True,
    )

    # Relationships
    lesson_request = relationship("LessonRequest", back_populates="quotes")
    teacher = relationship("User")
    lesson = relationship("Lesson", back_populates="quote", uselist=False)
    current_status = relationship("LessonQuoteStatus", foreign_keys=[current_status_id], post_update=True)
    status_history = relationship(
        "LessonQuoteStatus",
        foreign_keys="LessonQuoteStatus.lesson_quote_id",
        back_populates="lesson_quote",
        order_by="LessonQuoteStatus.id",
    )
