from celery.utils.log import get_task_logger
from sqlalchemy.orm import Session

from volunteer_hub.db import SessionLocal
from volunteer_hub.services.sweeper import run_sweep
from volunteer_hub.worker.celery_app import celery_app

logger = get_task_logger(__name__)


@celery_app.task(name="sweep_completed_events")
def sweep_completed_events() -> dict:
    db: Session = SessionLocal()
    try:
        logger.info("sweep_completed_events started")
        result = run_sweep(db)
        logger.info(
            "sweep_completed_events finished events=%s credited=%s failed=%s",
            result.events_completed,
            result.participations_credited,
            len(result.failed_event_ids),
        )
        return {
            "events_completed": result.events_completed,
            "participations_credited": result.participations_credited,
            "failed_event_ids": [str(event_id) for event_id in result.failed_event_ids],
        }
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
