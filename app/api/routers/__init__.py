"""
app/api/routers package marker.
"""

from app.api.routers.dashboard_router import router as dashboard_router
from app.api.routers.reports_router import router as reports_router
from app.api.routers.uploads_router import router as uploads_router

__all__ = [
    "dashboard_router",
    "reports_router",
    "uploads_router",
]
