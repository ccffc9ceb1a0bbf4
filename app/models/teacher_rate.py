"""
Teacher hourly rates per lesson type.

Rates are never edited in place: a price change deactivates the old row and
inserts a new ACTIVE one, so quotes keep pointing at the price they were
generated from. At most one ACTIVE rate per (teacher, lesson_type).
"""
import enum
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, JSONType, StatusTrackedMixin, utcnow
from .lesson_request import LessonType


class TeacherLessonHourlyRateStatusValue(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class TeacherLessonHourlyRateStatusTransition(str, enum.Enum):
    ACTIVATE = "ACTIVATE"
    DEACTIVATE = "DEACTIVATE"


class TeacherLessonHourlyRateStatus(Base):
    """Append-only status history for a rate"""
    __tablename__ = "teacher_lesson_hourly_rate_statuses"

    id = Column(Integer, primary_key=True, index=True)
    rate_id = Column(Integer, ForeignKey("teacher_lesson_hourly_rates.id"), nullable=False, index=True)
    status = Column(Enum(TeacherLessonHourlyRateStatusValue, name="teacher_rate_status_value"), nullable=False)
    context = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    rate = relationship("TeacherLessonHourlyRate", foreign_keys=[rate_id], back_populates="status_history")


class TeacherLessonHourlyRate(StatusTrackedMixin, Base):
    __tablename__ = "teacher_lesson_hourly_rates"

    status_record_class = TeacherLessonHourlyRateStatus
    status_parent_field = "rate_id"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_type = Column(Enum(LessonType, name="lesson_type"), nullable=False)
    rate_in_cents = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    current_status_id = Column(
        Integer,
        ForeignKey("teacher_lesson_hourly_rate_statuses.id", use_alter=True, name="fk_teacher_rates_current_status"),
        nullable=True,
    )

    # Relationships
    teacher = relationship("User", back_populates="hourly_rates")
    current_status = relationship(
        "TeacherLessonHourlyRateStatus", foreign_keys=[current_status_id], post_update=True
    )
    status_history = relationship(
        "TeacherLessonHourlyRateStatus",
        foreign_keys="TeacherLessonHourlyRateStatus.rate_id",
        back_populates="rate",
        order_by="TeacherLessonHourlyRateStatus.id",
    )
