"""
app/api/routers/dashboard_router.py

Estimations dashboard endpoint.

The snapshot is all-or-nothing: when a primary collection fails to load the
endpoint answers 503 with ``retryable: true`` instead of partial figures.
Per-entity site visit failures are absorbed and reported through
``failed_site_visit_fetches``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_request_dashboard_service
from app.schemas.dashboard import AggregationErrorResponse, DashboardSnapshotResponse
from app.services.dashboard_service import AggregationError, DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboard"])


@router.get(
    "/dashboard/estimations",
    response_model=DashboardSnapshotResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": AggregationErrorResponse}},
)
def get_estimations_dashboard(
    service: DashboardService = Depends(get_request_dashboard_service),
) -> DashboardSnapshotResponse:
    """
    Aggregate leads, site visits, quotations, revisions, projects and variations.

    Raises HTTP 401 when the backend rejects the credentials.
    Raises HTTP 503 when any primary collection cannot be loaded.
    """
    try:
        snapshot = service.aggregate()
    except AggregationError as exc:
        if exc.unauthorized:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Backend rejected the supplied credentials.",
            ) from exc
        logger.warning("Dashboard aggregation failed collection=%s", exc.collection)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=AggregationErrorResponse(
                message=str(exc),
                collection=exc.collection,
            ).model_dump(),
        ) from exc

    return DashboardSnapshotResponse.from_domain(snapshot)
