"""
app/api/routers package marker.
"""

from app.api.routers.dashboard_router import router as dashboard_router
from app.api.routers.revision_changes_router import router as revision_changes_router

__all__ = [
    "dashboard_router",
    "revision_changes_router",
]
