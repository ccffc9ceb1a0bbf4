from celery import Celery
from datetime import timedelta

from app.config import settings

# Create Celery app
celery_app = Celery(
    "lessons",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks"],
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,
    task_soft_time_limit=240,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
)

celery_app.conf.beat_schedule = {
    "expire-stale-quotes": {
        "task": "expire_stale_quotes",
        "schedule": timedelta(minutes=settings.quote_expiry_sweep_minutes),
        "args": [],
    },
}
