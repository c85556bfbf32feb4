# app/tasks/job_runner.py
"""Run a scheduled job under its Redis lock and record it in task_logs"""
import logging
import time
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from app.config.redis import job_lock
from app.models.task_log import TaskLog
from app.services.exceptions import JobAlreadyRunningError
from app.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def run_locked_job(
        db: Session,
        redis_client,
        job_name: str,
        task_name: str,
        work: Callable[[Session], Dict[str, Any]],
        task_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Execute `work(db)` unless another run of `job_name` holds the lock.

    Returns the work's result dict, or {"status": "skipped", ...} when the
    lock is held. Unexpected errors are recorded and re-raised.
    """
    task_log = TaskLog(
        task_name=task_name,
        task_id=task_id,
        payload=payload or {},
        status="running",
        started_at=utcnow(),
    )
    db.add(task_log)
    db.commit()

    started = time.monotonic()
    try:
        with job_lock(redis_client, job_name):
            result = work(db)
        task_log.status = "success"
        task_log.result = result
        return result
    except JobAlreadyRunningError as e:
        task_log.status = "skipped"
        task_log.error_message = str(e)
        return {"status": "skipped", "reason": "already_running"}
    except Exception as e:
        db.rollback()
        logger.exception(f"Job {task_name} failed")
        task_log.status = "failure"
        task_log.error_message = str(e)
        raise
    finally:
        task_log.completed_at = utcnow()
        task_log.execution_time_ms = int((time.monotonic() - started) * 1000)
        db.commit()
