"""
app/services/aggregation_service.py

Dashboard aggregation layer.

Reduces raw REST collections (leads, quotations, revisions, projects,
project variations, and per-entity site visits) into an immutable
:class:`~app.domain.dashboard.DashboardSnapshot`.

Status buckets
--------------
quotations          draft / pending / approved / rejected   + Σ grandTotal
revisions           pending / approved / rejected
projects            active / completed / on_hold
project variations  pending / approved / rejected           + Σ additionalCost

Pass budget
-----------
Every collection is walked once, except leads (one extra pass to build
the quotation lookup first). No statistic assumes server-side rollups.

Nothing here performs I/O; fetching belongs to DashboardService.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Final, Iterable, Mapping, Sequence

from app.domain.dashboard import (
    DashboardCollections,
    DashboardSnapshot,
    LeadBreakdown,
    SiteVisitStats,
    StatusBreakdown,
)
from kpi.dashboard_metrics import to_amount
from revision_diff.dates import parse_timestamp

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Bucket and field constants
# ---------------------------------------------------------------------------

APPROVAL_STATUS_FIELD: Final[str] = "managementApprovalStatus"
PROJECT_STATUS_FIELD: Final[str] = "status"
VISIT_TIMESTAMP_FIELD: Final[str] = "visitAt"

QUOTATION_STATUSES: Final[tuple[str, ...]] = ("draft", "pending", "approved", "rejected")
REVISION_STATUSES: Final[tuple[str, ...]] = ("pending", "approved", "rejected")
PROJECT_STATUSES: Final[tuple[str, ...]] = ("active", "completed", "on_hold")
VARIATION_STATUSES: Final[tuple[str, ...]] = ("pending", "approved", "rejected")


# ---------------------------------------------------------------------------
# Record helpers
# ---------------------------------------------------------------------------


def _get(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key)
    return None


def normalize_id(value: Any) -> str | None:
    """
    Comparison key for an identifier in any of the backend's shapes.

    Handles bare ids, populated documents (``{"_id": ...}``) and extended
    JSON ObjectIds (``{"$oid": ...}``). Blank values resolve to ``None``.
    """
    if isinstance(value, Mapping):
        if "$oid" in value:
            return normalize_id(value["$oid"])
        return normalize_id(value.get("_id") or value.get("id"))
    if value is None or isinstance(value, bool):
        return None
    key = str(value).strip()
    return key or None


def entity_id(record: Any) -> str | None:
    """Id of a top-level record (``_id``, falling back to ``id``)."""
    if not isinstance(record, Mapping):
        return None
    return normalize_id(record.get("_id") or record.get("id"))


def quotation_lead_id(quotation: Any) -> str | None:
    """Lead reference of a quotation, whether populated or a bare id."""
    return normalize_id(_get(quotation, "lead"))


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------


def _previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def _align_to(visit_at: datetime, now: datetime) -> datetime:
    # Aware timestamps are read in the dashboard's timezone; naive ones as-is.
    if visit_at.tzinfo is not None and now.tzinfo is not None:
        try:
            return visit_at.astimezone(now.tzinfo)
        except OverflowError:
            # Too close to datetime.min/max to shift; bucket on its own offset.
            return visit_at
    return visit_at


def count_site_visits(
    visit_lists: Iterable[Sequence[Any]],
    *,
    now: datetime,
) -> SiteVisitStats:
    """
    Count visits overall and per calendar month relative to *now*.

    Visits without a timestamp are skipped. A timestamp that is set but
    unparseable still counts toward the total.
    """
    this_month = (now.year, now.month)
    last_month = _previous_month(now.year, now.month)

    total = current = previous = 0
    for visits in visit_lists:
        for visit in visits or ():
            raw = _get(visit, VISIT_TIMESTAMP_FIELD)
            if not raw:
                continue
            total += 1
            visit_at = parse_timestamp(raw)
            if visit_at is None:
                continue
            visit_at = _align_to(visit_at, now)
            bucket = (visit_at.year, visit_at.month)
            if bucket == this_month:
                current += 1
            elif bucket == last_month:
                previous += 1

    return SiteVisitStats(total=total, this_month=current, last_month=previous)


def categorize_leads(
    leads: Sequence[Any],
    *,
    lead_site_visits: Mapping[str, Sequence[Any]],
    quotations: Sequence[Any],
) -> LeadBreakdown:
    """
    Classify each lead by site visits, quotations and conversion.
    """
    quoted_lead_ids = {
        lead_id for lead_id in (quotation_lead_id(q) for q in quotations) if lead_id is not None
    }

    with_visits = with_quotes = with_both = converted = no_activity = 0
    for lead in leads:
        lead_id = entity_id(lead)
        has_visits = lead_id is not None and len(lead_site_visits.get(lead_id, ())) > 0
        has_quotes = lead_id is not None and lead_id in quoted_lead_ids
        is_converted = bool(_get(lead, "projectId"))

        if is_converted:
            converted += 1
        if has_visits:
            with_visits += 1
        if has_quotes:
            with_quotes += 1
        if has_visits and has_quotes:
            with_both += 1
        if not (has_visits or has_quotes or is_converted):
            no_activity += 1

    return LeadBreakdown(
        total=len(leads),
        with_site_visits=with_visits,
        with_quotations=with_quotes,
        with_both=with_both,
        converted=converted,
        no_activity=no_activity,
    )


def status_breakdown(
    records: Sequence[Any],
    *,
    statuses: Sequence[str],
    status_field: str = APPROVAL_STATUS_FIELD,
    value_field: str | None = None,
) -> StatusBreakdown:
    """
    Partition *records* by *status_field* and optionally sum *value_field*.
    """
    counts = {status: 0 for status in statuses}
    total_value = 0.0
    for record in records:
        status = _get(record, status_field)
        if isinstance(status, str) and status in counts:
            counts[status] += 1
        if value_field is not None:
            total_value += to_amount(_get(record, value_field))

    return StatusBreakdown(
        total=len(records),
        counts=counts,
        total_value=total_value if value_field is not None else None,
    )


def aggregate_snapshot(
    collections: DashboardCollections,
    *,
    now: datetime,
    failed_site_visit_fetches: int = 0,
) -> DashboardSnapshot:
    """
    Build the full dashboard snapshot from already-fetched collections.

    Parameters
    ----------
    collections:
        Primary collections plus site visits keyed by owning entity id.
    now:
        Reference instant for the calendar-month buckets. Injected so the
        result does not depend on the wall clock.
    failed_site_visit_fetches:
        Number of fan-out fetches that degraded to empty lists.
    """
    site_visits = count_site_visits(
        [*collections.lead_site_visits.values(), *collections.project_site_visits.values()],
        now=now,
    )
    snapshot = DashboardSnapshot(
        leads=categorize_leads(
            collections.leads,
            lead_site_visits=collections.lead_site_visits,
            quotations=collections.quotations,
        ),
        site_visits=site_visits,
        quotations=status_breakdown(
            collections.quotations,
            statuses=QUOTATION_STATUSES,
            value_field="grandTotal",
        ),
        revisions=status_breakdown(collections.revisions, statuses=REVISION_STATUSES),
        projects=status_breakdown(
            collections.projects,
            statuses=PROJECT_STATUSES,
            status_field=PROJECT_STATUS_FIELD,
        ),
        project_variations=status_breakdown(
            collections.project_variations,
            statuses=VARIATION_STATUSES,
            value_field="additionalCost",
        ),
        generated_at=now,
        failed_site_visit_fetches=failed_site_visit_fetches,
    )
    logger.debug(
        "aggregate_snapshot leads=%d quotations=%d site_visits=%d failed_fetches=%d",
        snapshot.leads.total,
        snapshot.quotations.total,
        snapshot.site_visits.total,
        failed_site_visit_fetches,
    )
    return snapshot
