"""
app/api/dependencies.py

Shared FastAPI dependencies for backend access.
"""

from __future__ import annotations

from fastapi import Header

from app.services.dashboard_service import (
    DashboardService,
    build_dashboard_service,
    get_dashboard_service,
)
from app.services.revision_changes_service import (
    RevisionChangesService,
    build_revision_changes_service,
)


def get_forwarded_token(authorization: str | None = Header(default=None)) -> str | None:
    """
    Extract a bearer token from the incoming request to forward to the backend.
    """

    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


def get_request_dashboard_service(
    authorization: str | None = Header(default=None),
) -> DashboardService:
    """
    Dashboard service acting with the caller's token, or the configured one.
    """

    token = get_forwarded_token(authorization)
    if token is None:
        return get_dashboard_service()
    return build_dashboard_service(token=token)


def get_request_revision_changes_service(
    authorization: str | None = Header(default=None),
) -> RevisionChangesService:
    return build_revision_changes_service(token=get_forwarded_token(authorization))
