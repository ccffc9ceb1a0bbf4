from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from backends without tz support."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class StatusTrackedMixin:
    """
    Entity whose status lives in an append-only history table.

    Subclasses set `status_record_class` (the history model) and
    `status_parent_field` (the FK column name on that model), and define
    `current_status_id` / `current_status` / `status_history`.
    """
    status_record_class = None
    status_parent_field = None

    @property
    def status(self):
        record = self.current_status
        return record.status if record is not None else None
