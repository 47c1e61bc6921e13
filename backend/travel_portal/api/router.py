from fastapi import APIRouter

from travel_portal.api.routes import (
    accommodation,
    approvals,
    auth,
    claims,
    dashboard,
    notifications,
    reports,
    transport,
    trf,
    visa,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(trf.router, prefix="/trf", tags=["trf"])
api_router.include_router(claims.router, prefix="/claims", tags=["claims"])
api_router.include_router(visa.router, prefix="/visa", tags=["visa"])
api_router.include_router(transport.router, prefix="/transport", tags=["transport"])
api_router.include_router(accommodation.router, prefix="/accommodation", tags=["accommodation"])
api_router.include_router(approvals.router, prefix="/approvals", tags=["approvals"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
