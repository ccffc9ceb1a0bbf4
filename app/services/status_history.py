"""
Status history writes.

Every status change appends a record to the entity's history table and
repoints entity.current_status at it. Nothing here commits; the calling
service owns the transaction.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.errors import InvalidTransitionError
from app.services.status_machine import StatusMachine

logger = logging.getLogger(__name__)


def record_status(db: Session, entity, status, context: Optional[Dict[str, Any]] = None):
    """Append a history record for entity and make it the current one."""
    record_cls = entity.status_record_class
    record = record_cls(status=status, context=context)
    setattr(record, entity.status_parent_field, entity.id)
    db.add(record)
    db.flush()

    entity.current_status = record
    db.flush()
    return record


def initialize_status(
    db: Session, entity, machine: StatusMachine, context: Optional[Dict[str, Any]] = None
):
    """Record the starting status of a freshly flushed entity."""
    if entity.id is None:
        db.flush()
    return record_status(db, entity, machine.initial_status, context)


def apply_transition(
    db: Session,
    entity,
    machine: StatusMachine,
    transition,
    context: Optional[Dict[str, Any]] = None,
):
    current = entity.status
    result = machine.get_resulting_status(current, transition)
    if result is None:
        logger.warning(
            "Rejected %s transition %s from %s (id=%s)",
            machine.name, getattr(transition, "value", transition),
            getattr(current, "value", current), entity.id,
        )
        raise InvalidTransitionError(machine.name, current, transition)

    record = record_status(db, entity, result, context)
    logger.info(
        "%s %s: %s -> %s via %s",
        machine.name, entity.id, current.value, result.value,
        getattr(transition, "value", transition),
    )
    return record


def list_history(db: Session, entity) -> List:
    record_cls = entity.status_record_class
    parent_column = getattr(record_cls, entity.status_parent_field)
    return (
        db.query(record_cls)
        .filter(parent_column == entity.id)
        .order_by(record_cls.created_at, record_cls.id)
        .all()
    )
