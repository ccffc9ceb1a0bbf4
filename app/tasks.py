"""
Celery tasks

Tasks:
- expire_stale_quotes: reject CREATED quotes past their expiry (beat schedule)
"""
import logging

from app.celery_app import celery_app
from app.database import SessionLocal
from app.services import lesson_quotes

logger = logging.getLogger(__name__)


@celery_app.task(name="expire_stale_quotes", bind=True, max_retries=0)
def expire_stale_quotes(self):
    """Reject every CREATED quote whose expires_at has passed."""
    db = SessionLocal()
    try:
        expired = lesson_quotes.expire_stale_quotes(db)
        return {"expired": expired}

    except Exception as e:
        db.rollback()
        logger.exception("Quote expiry sweep failed")
        return {"error": str(e)}

    finally:
        db.close()
