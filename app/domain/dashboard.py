"""
app/domain/dashboard.py

Domain models for the estimations dashboard.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from kpi.dashboard_metrics import change_label, month_over_month_change, percentage

Record = Mapping[str, Any]


def _freeze_visits(
    visits_by_entity: Mapping[str, Sequence[Record]],
) -> Mapping[str, tuple[Record, ...]]:
    return MappingProxyType({key: tuple(value) for key, value in visits_by_entity.items()})


@dataclass(frozen=True)
class DashboardCollections:
    """
    Raw inputs for one aggregation run.

    ``lead_site_visits`` and ``project_site_visits`` are keyed by the owning
    entity id. An entity absent from the mapping has no known visits.
    """

    leads: Sequence[Record] = ()
    quotations: Sequence[Record] = ()
    revisions: Sequence[Record] = ()
    projects: Sequence[Record] = ()
    project_variations: Sequence[Record] = ()
    lead_site_visits: Mapping[str, Sequence[Record]] = field(default_factory=dict)
    project_site_visits: Mapping[str, Sequence[Record]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("leads", "quotations", "revisions", "projects", "project_variations"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        object.__setattr__(self, "lead_site_visits", _freeze_visits(self.lead_site_visits))
        object.__setattr__(self, "project_site_visits", _freeze_visits(self.project_site_visits))


@dataclass(frozen=True)
class SiteVisitFetchResult:
    """
    Outcome of one per-entity site-visit fetch.

    Exactly one of ``visits`` (on success) or ``error`` (on failure) is
    meaningful; a failed fetch carries an empty ``visits`` tuple.
    """

    owner: str
    entity_id: str
    visits: tuple[Record, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class LeadBreakdown:
    """
    Lead activity counts. Buckets overlap except ``no_activity``.
    """

    total: int
    with_site_visits: int
    with_quotations: int
    with_both: int
    converted: int
    no_activity: int

    def percentage(self, bucket: str) -> float:
        return percentage(getattr(self, bucket), self.total)

    def percentages(self) -> dict[str, float]:
        return {
            bucket: self.percentage(bucket)
            for bucket in (
                "with_site_visits",
                "with_quotations",
                "with_both",
                "converted",
                "no_activity",
            )
        }


@dataclass(frozen=True)
class SiteVisitStats:
    """
    Site visit totals with calendar-month buckets.
    """

    total: int
    this_month: int
    last_month: int

    @property
    def month_over_month_change(self) -> float:
        return month_over_month_change(self.this_month, self.last_month)

    @property
    def change_label(self) -> str:
        return change_label(self.this_month, self.last_month)


@dataclass(frozen=True)
class StatusBreakdown:
    """
    Records partitioned by a status field, with an optional monetary sum.

    ``counts`` holds every configured bucket, including empty ones.
    Records whose status matches no bucket only contribute to ``total``.
    """

    total: int
    counts: Mapping[str, int]
    total_value: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))

    def count(self, bucket: str) -> int:
        return self.counts.get(bucket, 0)

    def percentage(self, bucket: str) -> float:
        return percentage(self.count(bucket), self.total)

    def percentages(self) -> dict[str, float]:
        return {bucket: self.percentage(bucket) for bucket in self.counts}


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    Immutable dashboard rollup, consumed purely for rendering.
    """

    leads: LeadBreakdown
    site_visits: SiteVisitStats
    quotations: StatusBreakdown
    revisions: StatusBreakdown
    projects: StatusBreakdown
    project_variations: StatusBreakdown
    generated_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    failed_site_visit_fetches: int = 0
