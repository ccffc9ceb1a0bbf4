"""
Domain error taxonomy.

Services raise these; main.py renders them as {"detail": ..., "code": ...}
with the status code carried by each class. Callers branch on `code`,
never on the message text.
"""
from typing import Any, Optional


class DomainError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Malformed or missing input. Never mutates state."""
    status_code = 400
    code = "validation_error"


class NotFoundError(DomainError):
    status_code = 404
    code = "not_found"


class ForbiddenError(DomainError):
    status_code = 403
    code = "forbidden"


class InvalidTransitionError(DomainError):
    """The transition table has no entry for (current status, transition)."""
    status_code = 400
    code = "invalid_transition"

    def __init__(self, entity: str, current_status: Optional[Any], transition: Any):
        self.entity = entity
        self.current_status = _plain(current_status)
        self.transition = _plain(transition)
        super().__init__(
            f"Invalid status transition '{self.transition}' for {entity} "
            f"in status '{self.current_status}'"
        )


class ConflictError(DomainError):
    status_code = 409
    code = "conflict"


def _plain(value: Any) -> Any:
    return getattr(value, "value", value)
