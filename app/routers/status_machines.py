"""
Read-only catalogue of the transition tables, for clients that render
status badges and action buttons.
"""
from fastapi import APIRouter, HTTPException
from typing import List

from app.schemas.status_machines import StatusMachineResponse, StatusNode, TransitionOption
from app.services.status_machine import StatusMachine, display_label
from app.services.transitions import MACHINES

router = APIRouter(prefix="/status-machines", tags=["Status Machines"])


def _describe(machine: StatusMachine) -> StatusMachineResponse:
    nodes = []
    for status, row in machine.table.items():
        nodes.append(StatusNode(
            status=status.value,
            label=display_label(status),
            terminal=not row,
            transitions=[
                TransitionOption(
                    transition=transition.value,
                    label=display_label(transition),
                    to_status=result.value,
                )
                for transition, result in row.items()
            ],
        ))
    return StatusMachineResponse(
        entity=machine.name,
        initial_status=machine.initial_status.value,
        statuses=nodes,
    )


@router.get("", response_model=List[StatusMachineResponse])
def list_status_machines():
    return [_describe(machine) for machine in MACHINES.values()]


@router.get("/{entity}", response_model=StatusMachineResponse)
def get_status_machine(entity: str):
    machine = MACHINES.get(entity)
    if machine is None:
        raise HTTPException(status_code=404, detail=f"Unknown entity: {entity}")
    return _describe(machine)
