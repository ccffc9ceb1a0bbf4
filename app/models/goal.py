import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, JSONType, StatusTrackedMixin, utcnow


class GoalStatusValue(str, enum.Enum):
    CREATED = "CREATED"
    IN_PROGRESS = "IN_PROGRESS"
    ACHIEVED = "ACHIEVED"
    ABANDONED = "ABANDONED"


class GoalStatusTransition(str, enum.Enum):
    START = "START"
    COMPLETE = "COMPLETE"
    ABANDON = "ABANDON"


class GoalStatus(Base):
    __tablename__ = "goal_statuses"

    id = Column(Integer, primary_key=True, index=True)
    goal_id = Column(Integer, ForeignKey("goals.id"), nullable=False, index=True)
    status = Column(Enum(GoalStatusValue, name="goal_status_value"), nullable=False)
    context = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    goal = relationship("Goal", foreign_keys=[goal_id], back_populates="status_history")


class Goal(StatusTrackedMixin, Base):
    """Teacher-set goal attached to a lesson"""
    __tablename__ = "goals"

    status_record_class = GoalStatus
    status_parent_field = "goal_id"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    estimated_lesson_count = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    current_status_id = Column(
        Integer,
        ForeignKey("goal_statuses.id", use_alter=True, name="fk_goals_current_status"),
        nullable=True,
    )

    lesson = relationship("Lesson", back_populates="goals")
    current_status = relationship("GoalStatus", foreign_keys=[current_status_id], post_update=True)
    status_history = relationship(
        "GoalStatus",
        foreign_keys="GoalStatus.goal_id",
        back_populates="goal",
        order_by="GoalStatus.id",
    )
