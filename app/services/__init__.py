"""
app/services package marker.
"""

from app.services.dashboard_service import (
    AggregationError,
    DashboardService,
    build_dashboard_service,
    get_dashboard_service,
)
from app.services.revision_changes_service import (
    RevisionChangesService,
    build_revision_changes_service,
)

__all__ = [
    "AggregationError",
    "DashboardService",
    "build_dashboard_service",
    "get_dashboard_service",
    "RevisionChangesService",
    "build_revision_changes_service",
]
