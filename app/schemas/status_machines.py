from pydantic import BaseModel
from typing import List


class TransitionOption(BaseModel):
    transition: str
    label: str
    to_status: str


class StatusNode(BaseModel):
    status: str
    label: str
    terminal: bool
    transitions: List[TransitionOption]


class StatusMachineResponse(BaseModel):
    entity: str
    initial_status: str
    statuses: List[StatusNode]
