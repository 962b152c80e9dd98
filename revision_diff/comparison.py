"""
revision_diff/comparison.py

"Changes from parent" view model and diff computation.

A change record is ``{"field": str, "from": Any, "to": Any}``. Revisions and
project variations both carry an ordered list of these as
``diffFromParent``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import timezone
from typing import Any, Iterable, Mapping

from revision_diff.dates import parse_timestamp
from revision_diff.fields import REVISABLE_FIELDS, FieldKind, field_kind, field_label
from revision_diff.formatter import DiffFormatOptions, format_diff_value

_LINE_BREAK_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_MULTILINE_TEXT_FIELDS = frozenset({"exclusions", "paymentTerms"})


@dataclass(frozen=True)
class ComparisonRow:
    """One rendered row of the side-by-side comparison."""

    field: str
    label: str
    previous: str
    current: str


def _side(record: Mapping[str, Any], key: str, legacy_key: str) -> Any:
    # Older records stored the sides as fromValue / toValue.
    if key in record:
        return record[key]
    return record.get(legacy_key)


def build_comparison(
    diff_from_parent: Any,
    options: DiffFormatOptions | None = None,
) -> list[ComparisonRow]:
    """
    Render every change record into a comparison row, in order.

    Entries that are not objects are skipped; a non-list input yields no rows.
    """
    if not isinstance(diff_from_parent, (list, tuple)):
        return []

    rows: list[ComparisonRow] = []
    for record in diff_from_parent:
        if not isinstance(record, Mapping):
            continue
        field = record.get("field")
        field_name = field if isinstance(field, str) else ""
        rows.append(
            ComparisonRow(
                field=field_name,
                label=field_label(field),
                previous=format_diff_value(field_name, _side(record, "from", "fromValue"), options),
                current=format_diff_value(field_name, _side(record, "to", "toValue"), options),
            )
        )
    return rows


def normalize_for_diff(field: str, value: Any) -> Any:
    """
    Canonical form of a field value before comparison.

    * ``''`` and missing values become ``None``
    * date fields become ``YYYY-MM-DD`` (``None`` when unparseable)
    * ``exclusions`` / ``paymentTerms`` text has ``<br>`` tags turned into
      newlines, CRLF folded to LF, and surrounding whitespace trimmed
    """
    if value is None or value == "":
        return None
    if field_kind(field) is FieldKind.DATE:
        parsed = parse_timestamp(value)
        if parsed is None:
            return None
        if parsed.tzinfo is not None:
            try:
                parsed = parsed.astimezone(timezone.utc)
            except OverflowError:
                # Keep the calendar day of the source offset.
                pass
        return parsed.date().isoformat()
    if field in _MULTILINE_TEXT_FIELDS and isinstance(value, str):
        return _LINE_BREAK_TAG.sub("\n", value).replace("\r\n", "\n").strip()
    return value


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str, ensure_ascii=False)


def compute_diff_from_parent(
    parent: Mapping[str, Any],
    changes: Mapping[str, Any],
    *,
    fields: Iterable[str] = REVISABLE_FIELDS,
) -> list[dict[str, Any]]:
    """
    Change records a revision of *parent* carrying *changes* would store.

    Only *fields* present in *changes* are compared. The records hold the
    normalized values. An empty result means nothing changed.
    """
    diffs: list[dict[str, Any]] = []
    for field in fields:
        if field not in changes:
            continue
        before = normalize_for_diff(field, parent.get(field))
        after = normalize_for_diff(field, changes[field])
        if _canonical(before) != _canonical(after):
            diffs.append({"field": field, "from": before, "to": after})
    return diffs
