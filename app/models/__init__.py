# Database models
from .base import Base
from .user import User, UserRole
from .lesson_request import LessonRequest, LessonType
from .lesson_quote import (
    LessonQuote,
    LessonQuoteStatus,
    LessonQuoteStatusValue,
    LessonQuoteStatusTransition,
)
from .lesson import Lesson, LessonStatus, LessonStatusValue, LessonStatusTransition
from .teacher_rate import (
    TeacherLessonHourlyRate,
    TeacherLessonHourlyRateStatus,
    TeacherLessonHourlyRateStatusValue,
    TeacherLessonHourlyRateStatusTransition,
)
from .goal import Goal, GoalStatus, GoalStatusValue, GoalStatusTransition
from .objective import Objective, ObjectiveStatus, ObjectiveStatusValue, ObjectiveStatusTransition
from .lesson_summary import LessonSummary
from .lesson_plan import (
    LessonPlan,
    LessonPlanStatus,
    LessonPlanStatusValue,
    LessonPlanStatusTransition,
    Milestone,
    MilestoneStatus,
    MilestoneStatusValue,
    MilestoneStatusTransition,
)

__all__ = [
    "Base",
    "User",
    "UserRole",
    "LessonRequest",
    "LessonType",
    "LessonQuote",
    "LessonQuoteStatus",
    "LessonQuoteStatusValue",
    "LessonQuoteStatusTransition",
    "Lesson",
    "LessonStatus",
    "LessonStatusValue",
    "LessonStatusTransition",
    "TeacherLessonHourlyRate",
    "TeacherLessonHourlyRateStatus",
    "TeacherLessonHourlyRateStatusValue",
    "TeacherLessonHourlyRateStatusTransition",
    "Goal",
    "GoalStatus",
    "GoalStatusValue",
    "GoalStatusTransition",
    "Objective",
    "ObjectiveStatus",
    "ObjectiveStatusValue",
    "ObjectiveStatusTransition",
    "LessonSummary",
    "LessonPlan",
    "LessonPlanStatus",
    "LessonPlanStatusValue",
    "LessonPlanStatusTransition",
    "Milestone",
    "MilestoneStatus",
    "MilestoneStatusValue",
    "MilestoneStatusTransition",
]
