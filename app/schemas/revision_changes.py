"""
app/schemas/revision_changes.py

Request/response schemas for "changes from parent" views.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from revision_diff.comparison import ComparisonRow


class ComparisonRowResponse(BaseModel):
    field: str
    label: str
    previous: str
    current: str

    @classmethod
    def from_domain(cls, row: ComparisonRow) -> "ComparisonRowResponse":
        return cls(field=row.field, label=row.label, previous=row.previous, current=row.current)


class ChangesFromParentResponse(BaseModel):
    """
    Rendered diffFromParent of a revision or project variation.
    """

    entity_type: str
    entity_id: str
    parent_type: str | None = None
    parent_id: str | None = None
    changes: list[ComparisonRowResponse]


class ChangeRecord(BaseModel):
    """
    One raw change record; serialized with ``from`` / ``to`` keys.
    """

    model_config = ConfigDict(populate_by_name=True)

    field: str
    from_value: Any = Field(default=None, alias="from")
    to_value: Any = Field(default=None, alias="to")


class DiffPreviewRequest(BaseModel):
    """
    Parent document and the proposed field values of a new revision.
    """

    parent: dict[str, Any]
    changes: dict[str, Any]


class DiffPreviewResponse(BaseModel):
    has_changes: bool
    changes: list[ChangeRecord]
    rows: list[ComparisonRowResponse]
