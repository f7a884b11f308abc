"""
Celery application configuration for background tasks.
"""
from celery import Celery

from launchline.core.config import settings

celery_app = Celery(
    "launchline-core",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "launchline.tasks.outbox",
    ]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
    result_expires=3600,
    beat_schedule={
        "dispatch-outbox-events": {
            "task": "launchline.tasks.outbox.dispatch_outbox_events",
            "schedule": settings.outbox_dispatch_interval_seconds,
        },
    },
)

celery_app.conf.task_routes = {
    "launchline.tasks.outbox.*": {"queue": "events"},
}
