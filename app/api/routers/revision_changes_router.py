"""
app/api/routers/revision_changes_router.py

"Changes from parent" endpoints for revisions and project variations.
"""

from __future__ import annotations

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_request_revision_changes_service
from app.connectors import APIRequestError, APIUnauthorizedError
from app.schemas.revision_changes import (
    ChangeRecord,
    ChangesFromParentResponse,
    ComparisonRowResponse,
    DiffPreviewRequest,
    DiffPreviewResponse,
)
from app.services.revision_changes_service import EntityChanges, RevisionChangesService

router = APIRouter(tags=["revision-changes"])


def _to_response(changes: EntityChanges) -> ChangesFromParentResponse:
    return ChangesFromParentResponse(
        entity_type=changes.entity_type,
        entity_id=changes.entity_id,
        parent_type=changes.parent_type,
        parent_id=changes.parent_id,
        changes=[ComparisonRowResponse.from_domain(row) for row in changes.rows],
    )


def _raise_for_backend_error(exc: APIRequestError, entity: str) -> NoReturn:
    if isinstance(exc, APIUnauthorizedError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Backend rejected the supplied credentials.",
        ) from exc
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity} not found.",
        ) from exc
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Failed to load {entity.lower()} from backend.",
    ) from exc


@router.get("/revisions/{revision_id}/changes", response_model=ChangesFromParentResponse)
def get_revision_changes(
    revision_id: str,
    service: RevisionChangesService = Depends(get_request_revision_changes_service),
) -> ChangesFromParentResponse:
    """
    Field-by-field comparison between a revision and its parent.
    """
    try:
        changes = service.revision_changes(revision_id)
    except APIRequestError as exc:
        _raise_for_backend_error(exc, "Revision")
    return _to_response(changes)


@router.get(
    "/project-variations/{variation_id}/changes",
    response_model=ChangesFromParentResponse,
)
def get_variation_changes(
    variation_id: str,
    service: RevisionChangesService = Depends(get_request_revision_changes_service),
) -> ChangesFromParentResponse:
    """
    Field-by-field comparison between a project variation and its parent.
    """
    try:
        changes = service.variation_changes(variation_id)
    except APIRequestError as exc:
        _raise_for_backend_error(exc, "Variation")
    return _to_response(changes)


@router.post("/revisions/diff-preview", response_model=DiffPreviewResponse)
def preview_revision_diff(
    body: DiffPreviewRequest,
    service: RevisionChangesService = Depends(get_request_revision_changes_service),
) -> DiffPreviewResponse:
    """
    Show which fields a revision built from ``parent`` + ``changes`` would differ in.
    """
    preview = service.preview(body.parent, body.changes)
    return DiffPreviewResponse(
        has_changes=preview.has_changes,
        changes=[ChangeRecord.model_validate(record) for record in preview.changes],
        rows=[ComparisonRowResponse.from_domain(row) for row in preview.rows],
    )
