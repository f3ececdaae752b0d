"""
tests/test_invoice_row_mapping.py

Pytest unit tests for InvoiceRowMapper and InvoiceRowValidator.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.domain.errors import ValidationError
from app.domain.ingestion import RawRecord
from app.mappers.invoice_row_mapper import InvoiceRowMapper, normalize_header
from app.validators.invoice_row_validator import InvoiceRowValidator

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestInvoiceRowMapper:
    def test_normalize_header_ignores_case_and_punctuation(self) -> None:
        assert normalize_header(" Unit-Price ") == "unitprice"
        assert normalize_header("due_date") == "duedate"

    def test_aliases_map_onto_fields(self) -> None:
        mapped = InvoiceRowMapper().map_row({"Desc": "Widget", "QTY": "3", "Unit Price": "2.50"})

        assert mapped["description"] == "Widget"
        assert mapped["quantity"] == "3"
        assert mapped["price"] == "2.50"
        assert mapped["due_date"] is None
        assert mapped["notes"] is None

    def test_unknown_columns_are_ignored(self) -> None:
        mapped = InvoiceRowMapper().map_row({"description": "x", "_extra_1": "junk"})

        assert set(mapped) == {"description", "quantity", "price", "due_date", "notes"}

    def test_custom_aliases(self) -> None:
        mapper = InvoiceRowMapper(aliases={"description": ("label",)})

        assert mapper.map_row({"label": "Widget"})["description"] == "Widget"

    def test_payload_has_single_item(self) -> None:
        payload = InvoiceRowMapper.to_payload(
            {"description": "Widget", "quantity": "3", "price": "2.50", "due_date": None, "notes": None}
        )

        assert payload["items"] == [{"description": "Widget", "quantity": "3", "price": "2.50"}]


class TestInvoiceRowValidator:
    def test_valid_row_builds_payload(self) -> None:
        record = RawRecord(
            row_number=2,
            values={"desc": "Widget", "qty": "3", "price": "2.50", "due": "2026-04-01", "notes": " rush "},
        )

        payload = InvoiceRowValidator().validate(record, now=NOW)

        assert payload.items[0].description == "Widget"
        assert payload.items[0].quantity == 3
        assert payload.items[0].price == Decimal("2.50")
        assert payload.due_date == datetime(2026, 4, 1, tzinfo=timezone.utc)
        assert payload.notes == "rush"

    def test_missing_due_date_defaults_from_now(self) -> None:
        record = RawRecord(row_number=2, values={"desc": "Widget", "qty": "1", "price": "1"})

        payload = InvoiceRowValidator(default_due_days=14).validate(record, now=NOW)

        assert payload.due_date == NOW + timedelta(days=14)

    @pytest.mark.parametrize("missing", ["desc", "qty", "price"])
    def test_missing_required_cell_is_rejected(self, missing: str) -> None:
        values = {"desc": "Widget", "qty": "1", "price": "1.00"}
        values.pop(missing)

        with pytest.raises(ValidationError) as exc_info:
            InvoiceRowValidator().validate(RawRecord(row_number=5, values=values), now=NOW)

        assert exc_info.value.row_number == 5
        assert "Required value is missing" in exc_info.value.message

    @pytest.mark.parametrize(
        "values",
        [
            {"desc": "Gadget", "qty": "0", "price": "5.00"},
            {"desc": "Gadget", "qty": "two", "price": "5.00"},
            {"desc": "Gadget", "qty": "1", "price": "-1"},
            {"desc": "Gadget", "qty": "1", "price": "1.005"},
            {"desc": "Gadget", "qty": "1", "price": "1", "due_date": "not a date"},
        ],
    )
    def test_invalid_cells_are_rejected_with_row_number(self, values: dict[str, str]) -> None:
        with pytest.raises(ValidationError) as exc_info:
            InvoiceRowValidator().validate(RawRecord(row_number=3, values=values), now=NOW)

        assert exc_info.value.row_number == 3
