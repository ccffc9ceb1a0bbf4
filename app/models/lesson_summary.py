from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class LessonSummary(Base):
    """Teacher's write-up of a completed lesson, with homework. One per lesson."""
    __tablename__ = "lesson_summaries"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, unique=True)
    summary = Column(Text, nullable=False)
    homework = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    lesson = relationship("Lesson", back_populates="summary")
