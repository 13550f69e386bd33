from celery import Celery

from volunteer_hub.core.config import settings

celery_app = Celery(
    "volunteer_hub",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["volunteer_hub.worker.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        "sweep-completed-events": {
            "task": "sweep_completed_events",
            "schedule": float(settings.sweep_interval_seconds),
        },
    },
)
