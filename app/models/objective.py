import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, Date, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, JSONType, StatusTrackedMixin, utcnow
from .lesson_request import LessonType


class ObjectiveStatusValue(str, enum.Enum):
    CREATED = "CREATED"
    IN_PROGRESS = "IN_PROGRESS"
    ACHIEVED = "ACHIEVED"
    ABANDONED = "ABANDONED"


class ObjectiveStatusTransition(str, enum.Enum):
    START = "START"
    COMPLETE = "COMPLETE"
    ABANDON = "ABANDON"


class ObjectiveStatus(Base):
    __tablename__ = "objective_statuses"

    id = Column(Integer, primary_key=True, index=True)
    objective_id = Column(Integer, ForeignKey("objectives.id"), nullable=False, index=True)
    status = Column(Enum(ObjectiveStatusValue, name="objective_status_value"), nullable=False)
    context = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    objective = relationship("Objective", foreign_keys=[objective_id], back_populates="status_history")


class Objective(StatusTrackedMixin, Base):
    """A student's own learning objective, independent of any lesson"""
    __tablename__ = "objectives"

    status_record_class = ObjectiveStatus
    status_parent_field = "objective_id"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_type = Column(Enum(LessonType, name="lesson_type"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    target_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    current_status_id = Column(
        Integer,
        ForeignKey("objective_statuses.id", use_alter=True, name="fk_objectives_current_status"),
        nullable=True,
    )

    student = relationship("User", back_populates="objectives")
    current_status = relationship("ObjectiveStatus", foreign_keys=[current_status_id], post_update=True)
    status_history = relationship(
        "ObjectiveStatus",
        foreign_keys="ObjectiveStatus.objective_id",
        back_populates="objective",
        order_by="ObjectiveStatus.id",
    )
