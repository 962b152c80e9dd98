"""
kpi/dashboard_metrics.py

Pure formulas behind the estimations dashboard figures.

Formulas
--------
Percentage   = count / total * 100, rounded to one decimal
Change (MoM) = (current - previous) / previous * 100, rounded to one decimal

Zero denominators
-----------------
A percentage against an empty collection is 0.0.

Month-over-month change with ``previous == 0`` is a business rule, not a
generic guard: 100.0 when there is any activity this month, otherwise 0.0.

No I/O, no logging, no side effects.
"""

from __future__ import annotations

import math

_NEW_LABEL = "New"


def percentage(count: int | float, total: int | float) -> float:
    """
    Share of *count* in *total* as a percentage with one decimal place.

    Returns 0.0 when *total* is zero.
    """
    if not total:
        return 0.0
    return round(count / total * 100, 1)


def month_over_month_change(current: int | float, previous: int | float) -> float:
    """
    Percent change from *previous* to *current*.

    previous == 0 → 100.0 when current > 0, else 0.0.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


def change_label(current: int, previous: int) -> str:
    """
    Dashboard caption for a month-over-month figure.

    ``"+50.0%"`` / ``"-25.0%"`` when the previous month has activity,
    ``"New"`` when only the current month does, ``"0%"`` when neither does.
    """
    if previous > 0:
        change = month_over_month_change(current, previous)
        sign = "+" if change >= 0 else ""
        return f"{sign}{change:.1f}%"
    if current > 0:
        return _NEW_LABEL
    return "0%"


def to_amount(value: object) -> float:
    """
    Coerce a monetary field to float; anything non-numeric counts as zero.

    Accepts numbers and numeric strings (``"1,250.50"`` included).
    Booleans, ``None``, NaN and infinities are treated as zero.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        try:
            amount = float(value.replace(",", "").strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def format_currency(amount: float, currency: str = "AED") -> str:
    """Whole-unit currency display, e.g. ``AED 12,500``."""
    return f"{currency} {amount:,.0f}"
