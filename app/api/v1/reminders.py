# app/api/v1/reminders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_notification_gateway, get_redis_client
from app.config.database import get_db
from app.config.redis import RedisKeys
from app.models.reminder_log import ReminderLog
from app.schemas.reminders import DispatchRequest, ReminderLogResponse
from app.services.reminders.dispatch_service import run_dispatch
from app.tasks.job_runner import run_locked_job

router = APIRouter(prefix="/reminders", tags=["reminders"])


@router.post("/dispatch")
def dispatch_reminders(
        request: DispatchRequest,
        db: Session = Depends(get_db),
        gateway=Depends(get_notification_gateway),
        redis_client=Depends(get_redis_client),
):
    """Send (or with dry_run, preview) every reminder due today"""
    result = run_locked_job(
        db,
        redis_client,
        RedisKeys.REMINDER_DISPATCH_JOB,
        "reminders.dispatch_due",
        work=lambda session: run_dispatch(
            session, dry_run=request.dry_run, gateway=gateway
        ).model_dump(mode="json"),
        task_id="api",
        payload={"dry_run": request.dry_run},
    )

    if result.get("status") == "skipped":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Reminder dispatch is already running",
        )
    return result


@router.get("/logs", response_model=List[ReminderLogResponse])
def list_reminder_logs(
        limit: int = Query(50, ge=1, le=500),
        db: Session = Depends(get_db),
):
    """Most recent successful sends"""
    return (
        db.query(ReminderLog)
        .order_by(ReminderLog.sent_at.desc(), ReminderLog.id.desc())
        .limit(limit)
        .all()
    )
