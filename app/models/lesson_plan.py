"""
Lesson plans and their milestones.

A plan belongs to a teacher and may be linked to at most one lesson. Both
plans and milestones carry their own status history.
"""
import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, Date, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from .base import Base, JSONType, StatusTrackedMixin, utcnow


class LessonPlanStatusValue(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class LessonPlanStatusTransition(str, enum.Enum):
    SUBMIT_FOR_APPROVAL = "SUBMIT_FOR_APPROVAL"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REVISE = "REVISE"
    COMPLETE_PLAN = "COMPLETE_PLAN"
    CANCEL_PLAN = "CANCEL_PLAN"


class MilestoneStatusValue(str, enum.Enum):
    CREATED = "CREATED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class MilestoneStatusTransition(str, enum.Enum):
    START_PROGRESS = "START_PROGRESS"
    MARK_COMPLETED = "MARK_COMPLETED"
    CANCEL_MILESTONE = "CANCEL_MILESTONE"
    RESET_TO_CREATED = "RESET_TO_CREATED"


class LessonPlanStatus(Base):
    __tablename__ = "lesson_plan_statuses"

    id = Column(Integer, primary_key=True, index=True)
    lesson_plan_id = Column(Integer, ForeignKey("lesson_plans.id"), nullable=False, index=True)
    status = Column(Enum(LessonPlanStatusValue, name="lesson_plan_status_value"), nullable=False)
    context = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    lesson_plan = relationship("LessonPlan", foreign_keys=[lesson_plan_id], back_populates="status_history")


class LessonPlan(StatusTrackedMixin, Base):
    __tablename__ = "lesson_plans"

    status_record_class = LessonPlanStatus
    status_parent_field = "lesson_plan_id"

    id = Column(Integer, primary_key=True, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), nullable=True, unique=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    current_status_id = Column(
        Integer,
        ForeignKey("lesson_plan_statuses.id", use_alter=True, name="fk_lesson_plans_current_status"),
        nullable=True,
    )

    # Relationships
    teacher = relationship("User")
    lesson = relationship("Lesson", back_populates="lesson_plan")
    milestones = relationship("Milestone", back_populates="lesson_plan", order_by="Milestone.id")
    current_status = relationship("LessonPlanStatus", foreign_keys=[current_status_id], post_update=True)
    status_history = relationship(
        "LessonPlanStatus",
        foreign_keys="LessonPlanStatus.lesson_plan_id",
        back_populates="lesson_plan",
        order_by="LessonPlanStatus.id",
    )


class MilestoneStatus(Base):
    __tablename__ = "milestone_statuses"

    id = Column(Integer, primary_key=True, index=True)
    milestone_id = Column(Integer, ForeignKey("milestones.id"), nullable=False, index=True)
    status = Column(Enum(MilestoneStatusValue, name="milestone_status_value"), nullable=False)
    context = Column(JSONType, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    milestone = relationship("Milestone", foreign_keys=[milestone_id], back_populates="status_history")


class Milestone(StatusTrackedMixin, Base):
    __tablename__ = "milestones"

    status_record_class = MilestoneStatus
    status_parent_field = "milestone_id"

    id = Column(Integer, primary_key=True, index=True)
    lesson_plan_id = Column(Integer, ForeignKey("lesson_plans.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    current_status_id = Column(
        Integer,
        ForeignKey("milestone_statuses.id", use_alter=True, name="fk_milestones_current_status"),
        nullable=True,
    )

    lesson_plan = relationship("LessonPlan", back_populates="milestones")
    current_status = relationship("MilestoneStatus", foreign_keys=[current_status_id], post_update=True)
    status_history = relationship(
        "MilestoneStatus",
        foreign_keys="MilestoneStatus.milestone_id",
        back_populates="milestone",
        order_by="MilestoneStatus.id",
    )
