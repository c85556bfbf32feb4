"""Health checks and monitoring endpoints"""
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.api.dependencies import get_calendar_gateway, get_redis_client
from app.config.database import get_db
from app.services.calendar.base import CalendarGateway

health_router = APIRouter()


@health_router.get("/")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "salon-scheduler"}


@health_router.get("/detailed")
def detailed_health_check(
        db: Session = Depends(get_db),
        redis_client=Depends(get_redis_client),
        calendar: CalendarGateway = Depends(get_calendar_gateway),
):
    """Database, Redis and calendar credential checks"""
    checks = {
        "api": "healthy",
        "database": "unknown",
        "redis": "unknown",
        "calendar": "unknown",
    }

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {e}"

    try:
        redis_client.ping()
        checks["redis"] = "healthy"
    except Exception as e:
        checks["redis"] = f"unhealthy: {e}"

    checks["calendar"] = "configured" if calendar.is_configured() else "not configured"

    degraded = any(value.startswith("unhealthy") for value in checks.values())
    checks["overall"] = "degraded" if degraded else "healthy"
    return checks
