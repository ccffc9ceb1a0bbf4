from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional

from app.services.status_machine import display_label
from app.services.transitions import MACHINES


def _plain(value: Any) -> Any:
    return getattr(value, "value", value)


class StatusRecordResponse(BaseModel):
    """One entry of an entity's status history"""
    id: int
    status: str
    context: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True

    @field_validator("status", mode="before")
    @classmethod
    def enum_to_value(cls, v: Any) -> Any:
        return _plain(v)


class TransitionRequest(BaseModel):
    transition: str = Field(..., min_length=1, max_length=64)
    context: Optional[Dict[str, Any]] = None

    @field_validator("transition")
    @classmethod
    def normalize_transition(cls, v: str) -> str:
        return v.strip().upper()


class StatusTrackedResponse(BaseModel):
    """
    Base for entities with status history.

    Subclasses set machine_name; status_label and available_transitions are
    derived from the current status.
    """
    machine_name: ClassVar[str] = ""

    status: Optional[str] = None
    status_label: str = "Unknown"
    current_status: Optional[StatusRecordResponse] = None
    available_transitions: List[str] = []

    @field_validator("status", mode="before")
    @classmethod
    def enum_to_value(cls, v: Any) -> Any:
        return _plain(v)

    @model_validator(mode="after")
    def fill_status_fields(self):
        self.status_label = display_label(self.status)
        machine = MACHINES[self.machine_name]
        self.available_transitions = [t.value for t in machine.get_valid_transitions(self.status)]
        return self
