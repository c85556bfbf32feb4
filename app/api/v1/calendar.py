# app/api/v1/calendar.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_calendar_gateway, get_redis_client
from app.config.database import get_db
from app.config.redis import RedisKeys
from app.services.calendar.base import CalendarGateway
from app.services.calendar.reconciliation_service import run_reconciliation
from app.tasks.job_runner import run_locked_job

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.post("/sync")
def sync_calendar(
        db: Session = Depends(get_db),
        calendar: CalendarGateway = Depends(get_calendar_gateway),
        redis_client=Depends(get_redis_client),
):
    """
    Run one reconciliation pass now.

    Shares the lock with the scheduled job, so a manual sync while the beat
    run is in progress is refused with 409.
    """
    result = run_locked_job(
        db,
        redis_client,
        RedisKeys.CALENDAR_SYNC_JOB,
        "calendar.reconcile",
        work=lambda session: run_reconciliation(session, calendar).model_dump(mode="json"),
        task_id="api",
    )

    if result.get("status") == "skipped":
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Calendar sync is already running",
        )
    return result
