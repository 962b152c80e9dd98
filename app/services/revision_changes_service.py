"""
app/services/revision_changes_service.py

"Changes from parent" views for quotation revisions and project variations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from app.config import get_diff_display_settings
from app.connectors import WBESConnector, build_wbes_connector
from app.services.aggregation_service import normalize_id
from revision_diff.comparison import ComparisonRow, build_comparison, compute_diff_from_parent
from revision_diff.formatter import DiffFormatOptions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityChanges:
    """
    Rendered change list for one revision or variation.
    """

    entity_type: str
    entity_id: str
    parent_type: str | None
    parent_id: str | None
    rows: list[ComparisonRow] = field(default_factory=list)


@dataclass(frozen=True)
class DiffPreview:
    """
    Change records a new revision would carry, with their rendered rows.
    """

    changes: list[dict[str, Any]]
    rows: list[ComparisonRow]

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


def _parent_of(
    document: Mapping[str, Any],
    candidates: tuple[str, ...],
) -> tuple[str | None, str | None]:
    # The most specific parent wins (a revision of a revision, before the quotation).
    for key in candidates:
        parent_id = normalize_id(document.get(key))
        if parent_id is not None:
            return key, parent_id
    return None, None


class RevisionChangesService:
    """
    Loads revision/variation documents and renders their diffFromParent.
    """

    def __init__(
        self,
        *,
        connector: WBESConnector,
        options: DiffFormatOptions | None = None,
    ) -> None:
        self._connector = connector
        self._options = options or DiffFormatOptions()

    def revision_changes(self, revision_id: str) -> EntityChanges:
        """
        Raises APIRequestError when the revision cannot be loaded.
        """
        document = self._connector.get_revision(revision_id)
        return self._changes(
            document,
            entity_type="revision",
            entity_id=revision_id,
            parent_keys=("parentRevision", "parentQuotation"),
        )

    def variation_changes(self, variation_id: str) -> EntityChanges:
        """
        Raises APIRequestError when the variation cannot be loaded.
        """
        document = self._connector.get_project_variation(variation_id)
        return self._changes(
            document,
            entity_type="project_variation",
            entity_id=variation_id,
            parent_keys=("parentVariation", "parentProject"),
        )

    def preview(self, parent: Mapping[str, Any], changes: Mapping[str, Any]) -> DiffPreview:
        """
        Compute and render the diff for a revision that is not yet created.
        """
        records = compute_diff_from_parent(parent, changes)
        return DiffPreview(changes=records, rows=build_comparison(records, self._options))

    def _changes(
        self,
        document: Mapping[str, Any],
        *,
        entity_type: str,
        entity_id: str,
        parent_keys: tuple[str, ...],
    ) -> EntityChanges:
        parent_type, parent_id = _parent_of(document, parent_keys)
        rows = build_comparison(document.get("diffFromParent"), self._options)
        logger.debug(
            "Rendered %d change rows entity_type=%s entity_id=%s",
            len(rows),
            entity_type,
            entity_id,
        )
        return EntityChanges(
            entity_type=entity_type,
            entity_id=entity_id,
            parent_type=parent_type,
            parent_id=parent_id,
            rows=rows,
        )


def build_revision_changes_service(*, token: str | None = None) -> RevisionChangesService:
    """
    Build a changes service from environment settings.
    """

    return RevisionChangesService(
        connector=build_wbes_connector(token=token),
        options=DiffFormatOptions(date_format=get_diff_display_settings().date_format),
    )
