# ============================================================================
# FILE: app/api/dependencies.py
# Admin authentication and gateway dependencies
# ============================================================================
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.config.redis import get_redis
from app.config.settings import get_settings
from app.services.calendar.base import CalendarGateway
from app.services.calendar.google_calendar_service import GoogleCalendarGateway

# ============================================================================
# Security Schemes
# ============================================================================

admin_key_security = HTTPBearer(
    scheme_name="Admin API Key",
    description="Enter the ADMIN_API_KEY configured for this deployment",
    auto_error=False,
)


async def require_admin_key(
        credentials: HTTPAuthorizationCredentials = Depends(admin_key_security),
) -> None:
    """
    Dependency that requires the deployment's admin API key.
    Sessions and user accounts are handled in front of this service.
    """
    expected = get_settings().ADMIN_API_KEY

    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin API is disabled (ADMIN_API_KEY not set)",
        )

    if credentials is None or not secrets.compare_digest(credentials.credentials, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
            headers={"WWW-Authenticate": "Bearer"},
        )


# ============================================================================
# External collaborators
# ============================================================================

def get_calendar_gateway() -> CalendarGateway:
    return GoogleCalendarGateway()


def get_notification_gateway():
    """None lets the dispatch run build the gateway from the stored template"""
    return None


def get_redis_client():
    return get_redis()
