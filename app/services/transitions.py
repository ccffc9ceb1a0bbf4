"""
Transition tables for every status-tracked entity, and the machines built on them.

Each table maps a status to {transition -> resulting status}. Terminal statuses
map to an empty dict.
"""
from typing import Dict

from app.models.lesson import LessonStatusValue as LS, LessonStatusTransition as LT
from app.models.lesson_quote import LessonQuoteStatusValue as QS, LessonQuoteStatusTransition as QT
from app.models.goal import GoalStatusValue as GS, GoalStatusTransition as GT
from app.models.objective import ObjectiveStatusValue as OS, ObjectiveStatusTransition as OT
from app.models.lesson_plan import (
    LessonPlanStatusValue as PS,
    LessonPlanStatusTransition as PT,
    MilestoneStatusValue as MS,
    MilestoneStatusTransition as MT,
)
from app.models.teacher_rate import (
    TeacherLessonHourlyRateStatusValue as RS,
    TeacherLessonHourlyRateStatusTransition as RT,
)
from app.services.status_machine import StatusMachine

LESSON_TRANSITIONS = {
    LS.REQUESTED: {LT.ACCEPT: LS.ACCEPTED, LT.REJECT: LS.REJECTED},
    LS.ACCEPTED: {LT.COMPLETE: LS.COMPLETED, LT.VOID: LS.VOIDED},
    LS.REJECTED: {LT.VOID: LS.VOIDED},
    LS.COMPLETED: {LT.VOID: LS.VOIDED},
    LS.VOIDED: {},
}

LESSON_QUOTE_TRANSITIONS = {
    QS.CREATED: {QT.ACCEPT: QS.ACCEPTED, QT.REJECT: QS.REJECTED},
    QS.ACCEPTED: {},
    QS.REJECTED: {},
}

GOAL_TRANSITIONS = {
    GS.CREATED: {GT.START: GS.IN_PROGRESS, GT.ABANDON: GS.ABANDONED},
    GS.IN_PROGRESS: {GT.COMPLETE: GS.ACHIEVED, GT.ABANDON: GS.ABANDONED},
    GS.ACHIEVED: {GT.ABANDON: GS.ABANDONED},
    GS.ABANDONED: {},
}

# Objectives may be completed straight from CREATED; goals may not.
OBJECTIVE_TRANSITIONS = {
    OS.CREATED: {OT.START: OS.IN_PROGRESS, OT.COMPLETE: OS.ACHIEVED, OT.ABANDON: OS.ABANDONED},
    OS.IN_PROGRESS: {OT.COMPLETE: OS.ACHIEVED, OT.ABANDON: OS.ABANDONED},
    OS.ACHIEVED: {OT.ABANDON: OS.ABANDONED},
    OS.ABANDONED: {},
}

LESSON_PLAN_TRANSITIONS = {
    PS.DRAFT: {PT.SUBMIT_FOR_APPROVAL: PS.PENDING_APPROVAL, PT.CANCEL_PLAN: PS.CANCELLED},
    PS.PENDING_APPROVAL: {
        PT.APPROVE: PS.ACTIVE,
        PT.REJECT: PS.REJECTED,
        PT.REVISE: PS.DRAFT,
        PT.CANCEL_PLAN: PS.CANCELLED,
    },
    PS.ACTIVE: {PT.COMPLETE_PLAN: PS.COMPLETED, PT.CANCEL_PLAN: PS.CANCELLED},
    PS.REJECTED: {PT.REVISE: PS.DRAFT, PT.CANCEL_PLAN: PS.CANCELLED},
    PS.COMPLETED: {},
    PS.CANCELLED: {},
}

MILESTONE_TRANSITIONS = {
    MS.CREATED: {MT.START_PROGRESS: MS.IN_PROGRESS, MT.CANCEL_MILESTONE: MS.CANCELLED},
    MS.IN_PROGRESS: {
        MT.MARK_COMPLETED: MS.COMPLETED,
        MT.CANCEL_MILESTONE: MS.CANCELLED,
        MT.RESET_TO_CREATED: MS.CREATED,
    },
    MS.COMPLETED: {MT.CANCEL_MILESTONE: MS.CANCELLED},
    MS.CANCELLED: {},
}

TEACHER_RATE_TRANSITIONS = {
    RS.ACTIVE: {RT.DEACTIVATE: RS.INACTIVE},
    RS.INACTIVE: {RT.ACTIVATE: RS.ACTIVE},
}

lesson_machine = StatusMachine("lesson", LESSON_TRANSITIONS, LS.REQUESTED)
lesson_quote_machine = StatusMachine("lesson_quote", LESSON_QUOTE_TRANSITIONS, QS.CREATED)
goal_machine = StatusMachine("goal", GOAL_TRANSITIONS, GS.CREATED)
objective_machine = StatusMachine("objective", OBJECTIVE_TRANSITIONS, OS.CREATED)
lesson_plan_machine = StatusMachine("lesson_plan", LESSON_PLAN_TRANSITIONS, PS.DRAFT)
milestone_machine = StatusMachine("milestone", MILESTONE_TRANSITIONS, MS.CREATED)
teacher_rate_machine = StatusMachine("teacher_rate", TEACHER_RATE_TRANSITIONS, RS.ACTIVE)

MACHINES: Dict[str, StatusMachine] = {
    machine.name: machine
    for machine in (
        lesson_machine,
        lesson_quote_machine,
        goal_machine,
        objective_machine,
        lesson_plan_machine,
        milestone_machine,
        teacher_rate_machine,
    )
}
