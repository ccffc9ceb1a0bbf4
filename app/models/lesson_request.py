import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class LessonType(str, enum.Enum):
    VOICE = "VOICE"
    GUITAR = "GUITAR"
    BASS = "BASS"
    DRUMS = "DRUMS"


class LessonRequest(Base):
    """A student's request for a lesson; teachers answer it with quotes"""
    __tablename__ = "lesson_requests"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_type = Column(Enum(LessonType, name="lesson_type"), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    address = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    student = relationship("User", back_populates="lesson_requests")
    quotes = relationship("LessonQuote", back_populates="lesson_request", order_by="LessonQuote.id")
    lesson = relationship("Lesson", back_populates="lesson_request", uselist=False)
