"""
app/schemas package marker.
"""

from app.schemas.dashboard import (
    AggregationErrorResponse,
    DashboardSnapshotResponse,
    LeadBreakdownResponse,
    SiteVisitStatsResponse,
    StatusBreakdownResponse,
)
from app.schemas.revision_changes import (
    ChangeRecord,
    ChangesFromParentResponse,
    ComparisonRowResponse,
    DiffPreviewRequest,
    DiffPreviewResponse,
)

__all__ = [
    "AggregationErrorResponse",
    "DashboardSnapshotResponse",
    "LeadBreakdownResponse",
    "SiteVisitStatsResponse",
    "StatusBreakdownResponse",
    "ChangeRecord",
    "ChangesFromParentResponse",
    "ComparisonRowResponse",
    "DiffPreviewRequest",
    "DiffPreviewResponse",
]
