"""
app/domain package marker.
"""

from app.domain.dashboard import (
    DashboardCollections,
    DashboardSnapshot,
    LeadBreakdown,
    SiteVisitFetchResult,
    SiteVisitStats,
    StatusBreakdown,
)

__all__ = [
    "DashboardCollections",
    "DashboardSnapshot",
    "LeadBreakdown",
    "SiteVisitFetchResult",
    "SiteVisitStats",
    "StatusBreakdown",
]
