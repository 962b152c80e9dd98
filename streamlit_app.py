"""Streamlit frontend for the WBES estimations dashboard.

Replaceable UI layer: all display logic lives here. Figures come from
DashboardService; change tables come from RevisionChangesService.
"""

from __future__ import annotations

from typing import Any

import streamlit as st

from app.domain.dashboard import DashboardSnapshot, StatusBreakdown
from app.services.dashboard_service import AggregationError
from kpi.dashboard_metrics import format_currency

_CHANGE_SOURCES = {
    "Revision": "revision",
    "Project variation": "variation",
}


@st.cache_resource(show_spinner=False)
def _load_backend_handles() -> dict[str, Any]:
    """Build backend services lazily, once per Streamlit process."""
    from app.services.dashboard_service import get_dashboard_service  # noqa: PLC0415
    from app.services.revision_changes_service import (  # noqa: PLC0415
        build_revision_changes_service,
    )

    return {
        "dashboard_service": get_dashboard_service(),
        "changes_service": build_revision_changes_service(),
    }


def load_dashboard() -> tuple[DashboardSnapshot | None, str | None]:
    """
    Run one aggregation for display.

    Returns ``(snapshot, None)`` on success and ``(None, message)`` when a
    primary collection failed; the page then offers a retry.
    """
    service = _load_backend_handles()["dashboard_service"]
    try:
        return service.aggregate(), None
    except AggregationError as exc:
        return None, f"Could not load {exc.collection.replace('_', ' ')}. Please retry."


def load_changes(source: str, entity_id: str) -> tuple[list[dict[str, str]], str | None]:
    """
    Load the comparison rows of a revision or variation as table records.
    """
    from app.connectors import APIRequestError  # noqa: PLC0415

    service = _load_backend_handles()["changes_service"]
    try:
        if source == "variation":
            changes = service.variation_changes(entity_id)
        else:
            changes = service.revision_changes(entity_id)
    except APIRequestError as exc:
        return [], f"Could not load {source} {entity_id}: {exc}"

    records = [
        {"Field": row.label, "Previous Value": row.previous, "New Value": row.current}
        for row in changes.rows
    ]
    return records, None


def _bucket_caption(breakdown: StatusBreakdown, labels: dict[str, str]) -> str:
    return " • ".join(
        f"{label}: {breakdown.count(bucket)} ({breakdown.percentage(bucket)}%)"
        for bucket, label in labels.items()
    )


def _render_snapshot(snapshot: DashboardSnapshot) -> None:
    leads = snapshot.leads
    visits = snapshot.site_visits

    col_leads, col_visits, col_quotes, col_projects = st.columns(4)
    col_leads.metric("Total Leads", leads.total)
    col_leads.caption(f"Converted: {leads.converted}")
    col_visits.metric("Total Site Visits", visits.total, delta=f"{visits.change_label} this month")
    col_quotes.metric("Total Quotations", snapshot.quotations.total)
    col_quotes.caption(format_currency(snapshot.quotations.total_value or 0.0))
    col_projects.metric("Total Projects", snapshot.projects.total)

    st.subheader("Lead Activity")
    st.dataframe(
        [
            {"Bucket": "With site visits", "Leads": leads.with_site_visits,
             "Share %": leads.percentage("with_site_visits")},
            {"Bucket": "With quotations", "Leads": leads.with_quotations,
             "Share %": leads.percentage("with_quotations")},
            {"Bucket": "With both", "Leads": leads.with_both,
             "Share %": leads.percentage("with_both")},
            {"Bucket": "Converted", "Leads": leads.converted,
             "Share %": leads.percentage("converted")},
            {"Bucket": "No activity", "Leads": leads.no_activity,
             "Share %": leads.percentage("no_activity")},
        ],
        hide_index=True,
        use_container_width=True,
    )

    st.subheader("Pipeline")
    st.markdown(
        "**Quotations** — "
        + _bucket_caption(
            snapshot.quotations,
            {"draft": "Draft", "pending": "Pending", "approved": "Approved", "rejected": "Rejected"},
        )
    )
    st.markdown(
        "**Revisions** — "
        + _bucket_caption(
            snapshot.revisions,
            {"pending": "Pending", "approved": "Approved", "rejected": "Rejected"},
        )
    )
    st.markdown(
        "**Projects** — "
        + _bucket_caption(
            snapshot.projects,
            {"active": "Active", "completed": "Completed", "on_hold": "On Hold"},
        )
    )
    st.markdown(
        "**Variations** — "
        + _bucket_caption(
            snapshot.project_variations,
            {"pending": "Pending", "approved": "Approved", "rejected": "Rejected"},
        )
        + f" • Value: {format_currency(snapshot.project_variations.total_value or 0.0)}"
    )

    if snapshot.failed_site_visit_fetches:
        st.caption(
            f"{snapshot.failed_site_visit_fetches} site visit list(s) could not be loaded "
            "and were counted as empty."
        )


def main() -> None:
    st.set_page_config(page_title="WBES Estimations", page_icon="📊", layout="wide")
    st.title("Estimations Dashboard")
    st.caption("Comprehensive analytics for estimations and projects management")

    dashboard_tab, changes_tab = st.tabs(["Dashboard", "Changes from Parent"])

    with dashboard_tab:
        with st.spinner("Loading analytics…"):
            snapshot, error = load_dashboard()
        if error is not None:
            st.error(error)
            if st.button("Retry"):
                st.rerun()
        elif snapshot is not None:
            _render_snapshot(snapshot)

    with changes_tab:
        source_label = st.radio("Source", list(_CHANGE_SOURCES), horizontal=True)
        entity_id = st.text_input("Document id").strip()
        if entity_id:
            records, error = load_changes(_CHANGE_SOURCES[source_label], entity_id)
            if error is not None:
                st.error(error)
            elif not records:
                st.info("No changes recorded against the parent.")
            else:
                st.dataframe(records, hide_index=True, use_container_width=True)


if __name__ == "__main__":
    main()
