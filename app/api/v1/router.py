"""
API v1 router setup
"""
from fastapi import APIRouter

from app.api.v1 import appointments, availability, notifications, providers, services, slots

api_v1_router = APIRouter()

# ============================================================================
# CATALOG ROUTES (JWT authentication required)
# ============================================================================
api_v1_router.include_router(providers.router)
api_v1_router.include_router(services.router)

# ============================================================================
# BOOKING ROUTES (JWT authentication required)
# ============================================================================
api_v1_router.include_router(availability.router)
api_v1_router.include_router(slots.router)
api_v1_router.include_router(appointments.router)

# ============================================================================
# REAL-TIME ROUTES (token query parameter)
# ============================================================================
api_v1_router.include_router(notifications.router)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    """
    return {
        "version": "1.0",
        "authentication": "JWT Bearer token required (sub = user id, role = client|provider)",
        "resources": ["/providers", "/services", "/availability", "/slots", "/appointments", "/notifications/ws"],
    }
