"""
revision_diff/fields.py

Field registry for quotation revisions and project variations.

Each revisable field maps to a :class:`FieldKind` that names the value shape
the formatter should expect. Unknown fields are scalars.
"""

from __future__ import annotations

import re
from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping


class FieldKind(str, Enum):
    """Expected value shape for a revisable field."""

    SCALAR = "scalar"
    DATE = "date"
    # line-item arrays
    PAYMENT_TERMS = "payment_terms"
    SCOPE_OF_WORK = "scope_of_work"
    STRING_LIST = "string_list"
    # composite objects
    PRICE_SCHEDULE = "price_schedule"
    DELIVERY_TERMS = "delivery_terms"
    COMPANY_INFO = "company_info"

    @property
    def is_line_item_array(self) -> bool:
        return self in _LINE_ITEM_KINDS

    @property
    def is_composite(self) -> bool:
        return self in _COMPOSITE_KINDS


_LINE_ITEM_KINDS = frozenset({FieldKind.PAYMENT_TERMS, FieldKind.SCOPE_OF_WORK, FieldKind.STRING_LIST})
_COMPOSITE_KINDS = frozenset(
    {FieldKind.PRICE_SCHEDULE, FieldKind.DELIVERY_TERMS, FieldKind.COMPANY_INFO}
)

FIELD_KINDS: Final[Mapping[str, FieldKind]] = MappingProxyType(
    {
        "offerDate": FieldKind.DATE,
        "enquiryDate": FieldKind.DATE,
        "paymentTerms": FieldKind.PAYMENT_TERMS,
        "scopeOfWork": FieldKind.SCOPE_OF_WORK,
        "exclusions": FieldKind.STRING_LIST,
        "priceSchedule": FieldKind.PRICE_SCHEDULE,
        "deliveryCompletionWarrantyValidity": FieldKind.DELIVERY_TERMS,
        "companyInfo": FieldKind.COMPANY_INFO,
    }
)

FIELD_LABELS: Final[Mapping[str, str]] = MappingProxyType(
    {
        "companyInfo": "Company Info",
        "submittedTo": "Submitted To",
        "attention": "Attention",
        "offerReference": "Offer Reference",
        "enquiryNumber": "Enquiry Number",
        "offerDate": "Offer Date",
        "enquiryDate": "Enquiry Date",
        "projectTitle": "Project Title",
        "introductionText": "Introduction",
        "scopeOfWork": "Scope of Work",
        "priceSchedule": "Price Schedule",
        "ourViewpoints": "Our Viewpoints",
        "exclusions": "Exclusions",
        "paymentTerms": "Payment Terms",
        "deliveryCompletionWarrantyValidity": "Delivery & Warranty",
    }
)

# Fields a revision may change relative to its parent, in display order.
REVISABLE_FIELDS: Final[tuple[str, ...]] = tuple(FIELD_LABELS)

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def field_kind(field: object) -> FieldKind:
    if not isinstance(field, str):
        return FieldKind.SCALAR
    return FIELD_KINDS.get(field, FieldKind.SCALAR)


def field_label(field: object) -> str:
    """
    Display label: fixed for known fields, humanized camelCase otherwise.
    """
    if not isinstance(field, str) or not field.strip():
        return "(unknown field)"
    if field in FIELD_LABELS:
        return FIELD_LABELS[field]
    spaced = _CAMEL_BOUNDARY.sub(r" \1", field).strip()
    return spaced[:1].upper() + spaced[1:]
