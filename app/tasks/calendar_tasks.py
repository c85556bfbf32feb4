# ===== app/tasks/calendar_tasks.py =====
import logging

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.config.redis import RedisKeys, get_redis
from app.services.calendar.reconciliation_service import run_reconciliation
from app.tasks.job_runner import run_locked_job

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="calendar.reconcile")
def reconcile_calendar(self):
    """Pull the Google calendar into the appointment ledger (scheduled by beat)"""
    db = SessionLocal()
    try:
        return run_locked_job(
            db,
            get_redis(),
            job_name=RedisKeys.CALENDAR_SYNC_JOB,
            task_name="calendar.reconcile",
            task_id=self.request.id,
            work=lambda session: run_reconciliation(session).model_dump(mode="json"),
        )
    finally:
        db.close()
