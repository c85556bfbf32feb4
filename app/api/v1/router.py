"""
API v1 router setup
Every route below requires the admin API key
"""
from fastapi import APIRouter, Depends

from app.api.dependencies import require_admin_key
from app.api.v1 import appointments, calendar, reminders, templates

api_v1_router = APIRouter()

# ============================================================================
# ADMIN ROUTES (admin API key required)
# ============================================================================
admin_dependencies = [Depends(require_admin_key)]

api_v1_router.include_router(appointments.router, dependencies=admin_dependencies)
api_v1_router.include_router(calendar.router, dependencies=admin_dependencies)
api_v1_router.include_router(reminders.router, dependencies=admin_dependencies)
api_v1_router.include_router(templates.router, dependencies=admin_dependencies)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    return {
        "version": "1.0",
        "authentication": "Bearer <ADMIN_API_KEY>",
        "resources": ["/appointments", "/calendar/sync", "/reminders", "/templates/active"],
    }
