"""
tests/test_diff_formatter.py

Rendering tests for revision change values.

The formatter is total: every case below must return a string, never raise.
"""

from __future__ import annotations

import json

import pytest

from revision_diff.fields import REVISABLE_FIELDS, FieldKind, field_kind, field_label
from revision_diff.formatter import EMPTY, DiffFormatOptions, format_diff_value


class TestEmptyValues:
    @pytest.mark.parametrize("field", ["offerDate", "paymentTerms", "priceSchedule", "anything"])
    @pytest.mark.parametrize("value", [None, "", "   ", [], {}])
    def test_empty_renders_placeholder(self, field: str, value: object) -> None:
        assert format_diff_value(field, value) == EMPTY


class TestScalars:
    def test_plain_string_is_trimmed(self) -> None:
        assert format_diff_value("projectTitle", "  Tower B fit-out ") == "Tower B fit-out"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (True, "true"),
            (False, "false"),
            (12, "12"),
            (12.0, "12"),
            (12.5, "12.5"),
            (float("nan"), "NaN"),
        ],
    )
    def test_numbers_and_booleans(self, value: object, expected: str) -> None:
        assert format_diff_value("attention", value) == expected


class TestDates:
    def test_date_only_string(self) -> None:
        assert format_diff_value("offerDate", "2024-03-15") == "15/03/2024"

    def test_iso_timestamp(self) -> None:
        assert format_diff_value("enquiryDate", "2024-03-15T00:00:00.000Z") == "15/03/2024"

    def test_epoch_millis(self) -> None:
        assert format_diff_value("offerDate", 1710460800000) == "15/03/2024"

    def test_configured_format(self) -> None:
        options = DiffFormatOptions(date_format="%Y-%m-%d")
        assert format_diff_value("offerDate", "2024-03-15", options) == "2024-03-15"

    def test_unparseable_date_falls_back_to_text(self) -> None:
        assert format_diff_value("offerDate", "not-a-date") == "not-a-date"

    def test_free_text_date_is_left_alone(self) -> None:
        assert format_diff_value("offerDate", " March 2024 ") == "March 2024"

    def test_date_like_string_on_other_field_is_not_reformatted(self) -> None:
        assert format_diff_value("offerReference", "2024-03-15") == "2024-03-15"


class TestLineItems:
    def test_payment_terms(self) -> None:
        value = [{"milestoneDescription": "Deposit", "amountPercent": 30}]
        assert format_diff_value("paymentTerms", value) == "1. Deposit — 30%"

    def test_payment_terms_numbering_and_missing_description(self) -> None:
        value = [
            {"milestoneDescription": "Deposit", "amountPercent": 30},
            {"amountPercent": 70},
        ]
        assert format_diff_value("paymentTerms", value) == "1. Deposit — 30%\n2. - — 70%"

    def test_scope_of_work(self) -> None:
        value = [
            {
                "description": "Supply of panels",
                "quantity": 10,
                "unit": "nos",
                "locationRemarks": "Level 2",
            },
            {"description": "Testing"},
        ]
        assert format_diff_value("scopeOfWork", value) == (
            "1. Supply of panels — Qty: 10 nos — Level 2\n2. Testing"
        )

    def test_exclusions(self) -> None:
        value = ["No civil works", "No permits"]
        assert format_diff_value("exclusions", value) == "1. No civil works\n2. No permits"

    def test_null_item(self) -> None:
        assert format_diff_value("exclusions", ["A", None]) == f"1. A\n2. {EMPTY}"

    def test_unknown_field_list_of_objects(self) -> None:
        value = [{"name": "Ali", "role": "PM"}]
        assert format_diff_value("contacts", value) == "1. name: Ali, role: PM"


class TestComposites:
    def test_price_schedule(self) -> None:
        value = {
            "currency": "AED",
            "items": [
                {
                    "description": "Panel",
                    "quantity": 2,
                    "unit": "nos",
                    "unitRate": 500,
                    "totalAmount": 1000,
                }
            ],
            "subTotal": 1000,
            "taxDetails": {"vatRate": 5, "vatAmount": 50},
            "grandTotal": 1050,
        }
        assert format_diff_value("priceSchedule", value) == (
            "Currency: AED\n"
            "Items:\n"
            "  1. Panel — Qty: 2 nos x 500 = 1000\n"
            "Sub Total: 1000\n"
            "VAT: 5% = 50\n"
            "Grand Total: 1050"
        )

    def test_price_schedule_only_present_parts(self) -> None:
        assert format_diff_value("priceSchedule", {"grandTotal": 0}) == "Grand Total: 0"

    def test_delivery_terms(self) -> None:
        value = {
            "deliveryTimeline": "4 weeks",
            "warrantyPeriod": "1 year",
            "offerValidity": 30,
            "authorizedSignatory": "J. Doe",
        }
        assert format_diff_value("deliveryCompletionWarrantyValidity", value) == (
            "Delivery Timeline: 4 weeks\n"
            "Warranty Period: 1 year\n"
            "Offer Validity: 30 days\n"
            "Authorized Signatory: J. Doe"
        )

    def test_company_info(self) -> None:
        value = {"name": "WBES", "email": "info@wbes.test", "phone": ""}
        assert format_diff_value("companyInfo", value) == "Name: WBES\nEmail: info@wbes.test"

    def test_composite_without_known_parts(self) -> None:
        assert format_diff_value("companyInfo", {"fax": "123"}) == EMPTY

    def test_generic_nested_object(self) -> None:
        value = {"site": {"x": 1, "y": 2}, "note": None, "tags": ["a"]}
        assert format_diff_value("metadata", value) == (
            f"site:\n  x: 1\n  y: 2\nnote: {EMPTY}\ntags: 1. a"
        )


class TestJsonStrings:
    def test_serialized_payment_terms(self) -> None:
        raw = json.dumps([{"milestoneDescription": "Deposit", "amountPercent": 30}])
        assert format_diff_value("paymentTerms", raw) == "1. Deposit — 30%"

    def test_serialized_company_info(self) -> None:
        assert format_diff_value("companyInfo", '{"name": "WBES"}') == "Name: WBES"

    def test_invalid_json_is_returned_trimmed(self) -> None:
        assert format_diff_value("priceSchedule", " {not json ") == "{not json"


class TestShapeMismatches:
    def test_string_where_line_items_expected(self) -> None:
        assert format_diff_value("paymentTerms", "50% advance") == "50% advance"

    def test_scalar_where_composite_expected(self) -> None:
        assert format_diff_value("priceSchedule", 42) == "42"

    def test_list_where_composite_expected(self) -> None:
        assert format_diff_value("priceSchedule", [1, 2]) == "1. 1\n2. 2"

    def test_object_where_line_items_expected(self) -> None:
        assert format_diff_value("scopeOfWork", {"description": "Panels"}) == "description: Panels"

    def test_objects_inside_string_list(self) -> None:
        assert format_diff_value("exclusions", [{"a": 1}]) == '1. {"a": 1}'

    def test_unrenderable_object_falls_back_to_text(self) -> None:
        result = format_diff_value("projectTitle", object())
        assert isinstance(result, str)
        assert result

    @pytest.mark.parametrize("field", [*REVISABLE_FIELDS, "unknownField", ""])
    @pytest.mark.parametrize(
        "value",
        [
            "text",
            0,
            -1.5,
            True,
            [None, 1, "x", {"k": [1, {"deep": None}]}],
            {"items": "not-a-list", "taxDetails": "n/a", "currency": None},
            {"items": [None, 3, {"quantity": None}]},
            [[1, 2], [3]],
            "[1, 2",
            "{}",
        ],
    )
    def test_never_raises(self, field: str, value: object) -> None:
        result = format_diff_value(field, value)
        assert isinstance(result, str)
        assert result


class TestFieldRegistry:
    def test_kinds(self) -> None:
        assert field_kind("offerDate") is FieldKind.DATE
        assert field_kind("paymentTerms").is_line_item_array
        assert field_kind("priceSchedule").is_composite
        assert field_kind("projectTitle") is FieldKind.SCALAR
        assert field_kind(None) is FieldKind.SCALAR

    def test_known_labels(self) -> None:
        assert field_label("deliveryCompletionWarrantyValidity") == "Delivery & Warranty"
        assert field_label("introductionText") == "Introduction"

    def test_humanized_labels(self) -> None:
        assert field_label("siteContactName") == "Site Contact Name"

    @pytest.mark.parametrize("field", [None, "", "  ", 7])
    def test_unknown_field_label(self, field: object) -> None:
        assert field_label(field) == "(unknown field)"
