"""
Generic status-transition engine.

A StatusMachine wraps one transition table: status -> {transition -> status}.
Terminal statuses map to an empty dict. Queries never raise; an unknown or
unhashable status behaves like a terminal one (no valid transitions).
"""
import enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Type


def _coerce(value: Any, enum_cls: Type[enum.Enum]) -> Optional[enum.Enum]:
    """Map an enum member or its plain string value onto enum_cls; None if unknown."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


class StatusMachine:
    def __init__(
        self,
        name: str,
        table: Mapping[enum.Enum, Mapping[enum.Enum, enum.Enum]],
        initial_status: enum.Enum,
    ):
        if initial_status not in table:
            raise ValueError(f"{name}: initial status {initial_status} missing from table")
        self.name = name
        self.status_enum = type(initial_status)
        self.initial_status = initial_status

        transition_enum = None
        frozen: Dict[enum.Enum, Mapping[enum.Enum, enum.Enum]] = {}
        for status, row in table.items():
            for transition, result in row.items():
                if result not in table:
                    raise ValueError(f"{name}: {status}/{transition} leads to unknown status {result}")
                transition_enum = transition_enum or type(transition)
            frozen[status] = MappingProxyType(dict(row))
        self.transition_enum = transition_enum
        self.table = MappingProxyType(frozen)

    def __repr__(self) -> str:
        return f"<StatusMachine {self.name}>"

    def _row(self, current: Any) -> Mapping[enum.Enum, enum.Enum]:
        status = _coerce(current, self.status_enum)
        if status is None:
            return MappingProxyType({})
        return self.table.get(status, MappingProxyType({}))

    def is_valid_transition(self, current: Any, transition: Any) -> bool:
        return self.get_resulting_status(current, transition) is not None

    def get_resulting_status(self, current: Any, transition: Any) -> Optional[enum.Enum]:
        row = self._row(current)
        if not row:
            return None
        action = _coerce(transition, self.transition_enum)
        if action is None:
            return None
        return row.get(action)

    def get_valid_transitions(self, current: Any) -> List[enum.Enum]:
        return list(self._row(current).keys())

    @property
    def statuses(self) -> List[enum.Enum]:
        return list(self.table.keys())

    @property
    def transitions(self) -> List[enum.Enum]:
        return list(self.transition_enum) if self.transition_enum else []

    @property
    def terminal_statuses(self) -> List[enum.Enum]:
        return [status for status, row in self.table.items() if not row]

    def is_terminal(self, current: Any) -> bool:
        return not self._row(current)


def display_label(value: Any) -> str:
    """IN_PROGRESS -> 'In Progress'. Empty input yields 'Unknown'."""
    raw = getattr(value, "value", value)
    if not raw:
        return "Unknown"
    words = [word for word in str(raw).split("_") if word]
    if not words:
        return "Unknown"
    return " ".join(word.capitalize() for word in words)
