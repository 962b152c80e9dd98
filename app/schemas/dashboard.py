"""
app/schemas/dashboard.py

Response schemas for the estimations dashboard.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.dashboard import (
    DashboardSnapshot,
    LeadBreakdown,
    SiteVisitStats,
    StatusBreakdown,
)
from kpi.dashboard_metrics import format_currency


class LeadBreakdownResponse(BaseModel):
    """
    Lead activity counts with per-bucket percentages of all leads.
    """

    total: int = Field(..., ge=0)
    with_site_visits: int = Field(..., ge=0)
    with_quotations: int = Field(..., ge=0)
    with_both: int = Field(..., ge=0)
    converted: int = Field(..., ge=0)
    no_activity: int = Field(..., ge=0)
    percentages: dict[str, float]

    @classmethod
    def from_domain(cls, leads: LeadBreakdown) -> "LeadBreakdownResponse":
        return cls(
            total=leads.total,
            with_site_visits=leads.with_site_visits,
            with_quotations=leads.with_quotations,
            with_both=leads.with_both,
            converted=leads.converted,
            no_activity=leads.no_activity,
            percentages=leads.percentages(),
        )


class SiteVisitStatsResponse(BaseModel):
    """
    Site visit totals with the month-over-month figure.
    """

    total: int = Field(..., ge=0)
    this_month: int = Field(..., ge=0)
    last_month: int = Field(..., ge=0)
    month_over_month_change: float
    change_label: str

    @classmethod
    def from_domain(cls, visits: SiteVisitStats) -> "SiteVisitStatsResponse":
        return cls(
            total=visits.total,
            this_month=visits.this_month,
            last_month=visits.last_month,
            month_over_month_change=visits.month_over_month_change,
            change_label=visits.change_label,
        )


class StatusBreakdownResponse(BaseModel):
    """
    Status bucket counts for one collection.
    """

    total: int = Field(..., ge=0)
    counts: dict[str, int]
    percentages: dict[str, float]
    total_value: float | None = None
    total_value_display: str | None = None

    @classmethod
    def from_domain(cls, breakdown: StatusBreakdown) -> "StatusBreakdownResponse":
        return cls(
            total=breakdown.total,
            counts=dict(breakdown.counts),
            percentages=breakdown.percentages(),
            total_value=breakdown.total_value,
            total_value_display=(
                format_currency(breakdown.total_value)
                if breakdown.total_value is not None
                else None
            ),
        )


class DashboardSnapshotResponse(BaseModel):
    """
    API response model for one dashboard aggregation.
    """

    leads: LeadBreakdownResponse
    site_visits: SiteVisitStatsResponse
    quotations: StatusBreakdownResponse
    revisions: StatusBreakdownResponse
    projects: StatusBreakdownResponse
    project_variations: StatusBreakdownResponse
    generated_at: datetime
    failed_site_visit_fetches: int = Field(0, ge=0)

    @classmethod
    def from_domain(cls, snapshot: DashboardSnapshot) -> "DashboardSnapshotResponse":
        return cls(
            leads=LeadBreakdownResponse.from_domain(snapshot.leads),
            site_visits=SiteVisitStatsResponse.from_domain(snapshot.site_visits),
            quotations=StatusBreakdownResponse.from_domain(snapshot.quotations),
            revisions=StatusBreakdownResponse.from_domain(snapshot.revisions),
            projects=StatusBreakdownResponse.from_domain(snapshot.projects),
            project_variations=StatusBreakdownResponse.from_domain(snapshot.project_variations),
            generated_at=snapshot.generated_at,
            failed_site_visit_fetches=snapshot.failed_site_visit_fetches,
        )


class AggregationErrorResponse(BaseModel):
    """
    Error body returned when the dashboard cannot be built.
    """

    message: str
    collection: str
    retryable: bool = True
