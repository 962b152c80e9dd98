"""
revision_diff/formatter.py

Human-readable rendering of revision change values.

:func:`format_diff_value` renders one side (``from`` or ``to``) of a change
record. It is pure and total: every input shape resolves to a string, with
``"(empty)"`` for absent values and the raw serialized value as the last
resort.

Dispatch order
--------------
1. ``None``                         → ``"(empty)"``
2. date fields                      → configured date format, if parseable
3. lists / tuples                   → 1-indexed lines, per-kind item layout
4. mappings                         → bespoke composite layout, or ``key: value``
5. strings that look like JSON      → parsed and re-dispatched
6. strings / numbers / booleans     → natural text form
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping, Sequence

from revision_diff.dates import parse_calendar_date
from revision_diff.fields import FieldKind, field_kind

EMPTY = "(empty)"
DEFAULT_DATE_FORMAT = "%d/%m/%Y"


@dataclass(frozen=True)
class DiffFormatOptions:
    """Rendering options injected by the caller."""

    date_format: str = DEFAULT_DATE_FORMAT


_DEFAULT_OPTIONS = DiffFormatOptions()


def format_diff_value(
    field: str,
    value: Any,
    options: DiffFormatOptions | None = None,
) -> str:
    """
    Render *value* of *field* for side-by-side comparison. Never raises.
    """
    opts = options or _DEFAULT_OPTIONS
    try:
        return _format(field, value, opts)
    except Exception:
        return _raw_fallback(value)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def _format(field: str, value: Any, opts: DiffFormatOptions) -> str:
    if value is None:
        return EMPTY

    kind = field_kind(field)
    if kind is FieldKind.DATE:
        parsed = parse_calendar_date(value)
        if parsed is not None:
            return parsed.strftime(opts.date_format)

    if isinstance(value, (list, tuple)):
        return _format_sequence(kind, value, opts)
    if isinstance(value, Mapping):
        return _format_mapping(kind, value, opts)
    if isinstance(value, str):
        return _format_string(field, value, opts)
    if isinstance(value, (bool, int, float)):
        return _inline(value)
    if isinstance(value, date):
        return value.isoformat()
    return _raw_fallback(value)


def _format_string(field: str, value: str, opts: DiffFormatOptions) -> str:
    text = value.strip()
    if len(text) > 1 and text[0] in "{[":
        try:
            parsed = json.loads(text)
        except ValueError:
            return text
        return _format(field, parsed, opts)
    return text or EMPTY


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def _number_text(value: int | float) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def _inline(value: Any) -> str:
    """Single-line text for a value embedded in a larger template."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _number_text(value)
    if isinstance(value, str):
        return value
    if isinstance(value, date):
        return value.isoformat()
    return json.dumps(value, default=str, ensure_ascii=False)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _or_dash(value: Any) -> str:
    return "-" if _blank(value) or value is False else _inline(value)


def _qty_unit(item: Mapping[str, Any]) -> str:
    parts = (_inline(item.get("quantity")), _inline(item.get("unit")))
    return " ".join(part for part in parts if part.strip())


def _raw_fallback(value: Any) -> str:
    try:
        return json.dumps(value, indent=2, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        pass
    try:
        return str(value) or EMPTY
    except Exception:
        return EMPTY


# ---------------------------------------------------------------------------
# Line-item arrays
# ---------------------------------------------------------------------------


def _payment_term_line(item: Mapping[str, Any]) -> str:
    return f"{_or_dash(item.get('milestoneDescription'))} — {_inline(item.get('amountPercent'))}%"


def _scope_line(item: Mapping[str, Any]) -> str:
    line = _or_dash(item.get("description"))
    qty_unit = _qty_unit(item)
    if qty_unit:
        line += f" — Qty: {qty_unit}"
    remarks = item.get("locationRemarks")
    if not _blank(remarks):
        line += f" — {_inline(remarks)}"
    return line


def _generic_item_line(item: Mapping[str, Any]) -> str:
    return ", ".join(f"{key}: {_inline(val)}" for key, val in item.items())


_ITEM_RENDERERS: dict[FieldKind, Callable[[Mapping[str, Any]], str]] = {
    FieldKind.PAYMENT_TERMS: _payment_term_line,
    FieldKind.SCOPE_OF_WORK: _scope_line,
}


def _format_sequence(kind: FieldKind, items: Sequence[Any], opts: DiffFormatOptions) -> str:
    if not items:
        return EMPTY

    render_mapping = _ITEM_RENDERERS.get(kind, _generic_item_line)
    lines = []
    for index, item in enumerate(items, start=1):
        if item is None:
            body = EMPTY
        elif isinstance(item, Mapping) and kind is not FieldKind.STRING_LIST:
            body = render_mapping(item)
        else:
            body = _inline(item)
        lines.append(f"{index}. {body}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Composite objects
# ---------------------------------------------------------------------------


def _price_schedule_lines(schedule: Mapping[str, Any]) -> list[str]:
    lines: list[str] = []
    if not _blank(schedule.get("currency")):
        lines.append(f"Currency: {_inline(schedule['currency'])}")

    items = schedule.get("items")
    if isinstance(items, (list, tuple)) and items:
        lines.append("Items:")
        for index, item in enumerate(items, start=1):
            if not isinstance(item, Mapping):
                lines.append(f"  {index}. {_or_dash(item)}")
                continue
            line = f"  {index}. {_or_dash(item.get('description'))}"
            qty_unit = _qty_unit(item)
            if qty_unit:
                line += f" — Qty: {qty_unit}"
            if not _blank(item.get("unitRate")):
                line += f" x {_inline(item['unitRate'])}"
            if not _blank(item.get("totalAmount")):
                line += f" = {_inline(item['totalAmount'])}"
            lines.append(line)

    if schedule.get("subTotal") is not None:
        lines.append(f"Sub Total: {_inline(schedule['subTotal'])}")

    tax = schedule.get("taxDetails")
    if isinstance(tax, Mapping):
        rate, amount = tax.get("vatRate"), tax.get("vatAmount")
        if not (_blank(rate) and _blank(amount)):
            vat = f"VAT: {_inline(rate)}%"
            if not _blank(amount):
                vat += f" = {_inline(amount)}"
            lines.append(vat)

    if schedule.get("grandTotal") is not None:
        lines.append(f"Grand Total: {_inline(schedule['grandTotal'])}")
    return lines


def _delivery_terms_lines(terms: Mapping[str, Any]) -> list[str]:
    lines: list[str] = []
    if terms.get("deliveryTimeline"):
        lines.append(f"Delivery Timeline: {_inline(terms['deliveryTimeline'])}")
    if terms.get("warrantyPeriod"):
        lines.append(f"Warranty Period: {_inline(terms['warrantyPeriod'])}")
    if terms.get("offerValidity") is not None:
        lines.append(f"Offer Validity: {_inline(terms['offerValidity'])} days")
    if terms.get("authorizedSignatory"):
        lines.append(f"Authorized Signatory: {_inline(terms['authorizedSignatory'])}")
    return lines


def _company_info_lines(info: Mapping[str, Any]) -> list[str]:
    return [
        f"{label}: {_inline(info[key])}"
        for key, label in (
            ("name", "Name"),
            ("address", "Address"),
            ("phone", "Phone"),
            ("email", "Email"),
        )
        if info.get(key)
    ]


_COMPOSITE_RENDERERS: dict[FieldKind, Callable[[Mapping[str, Any]], list[str]]] = {
    FieldKind.PRICE_SCHEDULE: _price_schedule_lines,
    FieldKind.DELIVERY_TERMS: _delivery_terms_lines,
    FieldKind.COMPANY_INFO: _company_info_lines,
}


def _format_mapping(kind: FieldKind, value: Mapping[str, Any], opts: DiffFormatOptions) -> str:
    renderer = _COMPOSITE_RENDERERS.get(kind)
    if renderer is not None:
        lines = renderer(value)
    else:
        lines = [_generic_entry(str(key), val, opts) for key, val in value.items()]
    return "\n".join(lines) if lines else EMPTY


def _generic_entry(key: str, value: Any, opts: DiffFormatOptions) -> str:
    if value is None:
        return f"{key}: {EMPTY}"
    if isinstance(value, (Mapping, list, tuple)):
        rendered = _format(key, value, opts)
        if "\n" in rendered:
            indented = "\n".join(f"  {line}" for line in rendered.splitlines())
            return f"{key}:\n{indented}"
        return f"{key}: {rendered}"
    return f"{key}: {_inline(value)}"
