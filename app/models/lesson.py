import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, JSONType, StatusTrackedMixin, utcnow
from .lesson_request import LessonType


class LessonStatusValue(str, enum.Enum):
    REQUESTED = "REQUESTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    VOIDED = "VOIDED"


class LessonStatusTransition(str, enum.Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    COMPLETE = "COMPLETE"
    VOID = "VOID"


class LessonStatus(Base):
    __tablename__ = "lesson_statuses"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    status = Column(Enum(LessonStatusValue, name="lesson_status_value"), nullable=False)
    context = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    lesson = relationship("Lesson", foreign_keys=[lesson_id], back_populates="status_history")


class Lesson(StatusTrackedMixin, Base):
    """
    A booked lesson, created only by accepting a quote.

    Schedule fields are copied from the request at acceptance time. The unique
    constraints on quote_id and lesson_request_id keep it one lesson per request
    even if two acceptances race past the row lock.
    """
    __tablename__ = "lessons"

    status_record_class = LessonStatus
    status_parent_field = "lesson_id"

    id = Column(Integer, primary_key=True, index=True)
    quote_id = Column(Integer, ForeignKey("lesson_quotes.id"), nullable=False, unique=True)
    lesson_request_id = Column(Integer, ForeignKey("lesson_requests.id"), nullable=False, unique=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_type = Column(Enum(LessonType, name="lesson_type"), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    address = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    current_status_id = Column(
        Integer,
        ForeignKey("lesson_statuses.id", use_alter=True, name="fk_lessons_current_status"),
        nullable=True,
    )

    # Relationships
    quote = relationship("LessonQuote", back_populates="lesson")
    lesson_request = relationship("LessonRequest", back_populates="lesson")
    teacher = relationship("User", foreign_keys=[teacher_id])
    student = relationship("User", foreign_keys=[student_id])
    goals = relationship("Goal", back_populates="lesson", order_by="Goal.id")
    lesson_plan = relationship("LessonPlan", back_populates="lesson", uselist=False)
    summary = relationship("LessonSummary", back_populates="lesson", uselist=False)
    current_status = relationship("LessonStatus", foreign_keys=[current_status_id], post_update=True)
    status_history = relationship(
        "LessonStatus",
        foreign_keys="LessonStatus.lesson_id",
        back_populates="lesson",
        order_by="LessonStatus.id",
    )
