# ===== app/tasks/reminder_tasks.py =====
import logging

from app.config.celery_config import celery_app
from app.config.database import SessionLocal
from app.config.redis import RedisKeys, get_redis
from app.services.reminders.dispatch_service import run_dispatch
from app.tasks.job_runner import run_locked_job

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="reminders.dispatch_due")
def dispatch_due_reminders(self, dry_run: bool = False):
    """
    Send reminders for every configured lead-time window.

    No automatic retry: failed sends stay due and are picked up by the next
    scheduled run.
    """
    db = SessionLocal()
    try:
        return run_locked_job(
            db,
            get_redis(),
            job_name=RedisKeys.REMINDER_DISPATCH_JOB,
            task_name="reminders.dispatch_due",
            task_id=self.request.id,
            payload={"dry_run": dry_run},
            work=lambda session: run_dispatch(session, dry_run=dry_run).model_dump(mode="json"),
        )
    finally:
        db.close()
