"""
tests/test_invoice_lifecycle.py

Pytest unit tests for the pure invoice normalization and status rules.

All tests are pure Python; no database is involved.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.domain.errors import ValidationError
from app.services.invoice_lifecycle import (
    apply_due_date_status,
    compute_invoice_amount,
    compute_item_amount,
    format_invoice_number,
    normalize_invoice,
    validate_status_target,
)
from db.models.invoice import Invoice, InvoiceItem, InvoiceStatus

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _invoice(*items: tuple[int, str], due_date: datetime, status: str | None = None) -> Invoice:
    return Invoice(
        invoice_number="INV00001",
        status=status,
        due_date=due_date,
        items=[
            InvoiceItem(description=f"item {index}", quantity=quantity, price=Decimal(price))
            for index, (quantity, price) in enumerate(items)
        ],
    )


class TestAmounts:
    def test_item_amount_is_quantity_times_price(self) -> None:
        assert compute_item_amount(3, Decimal("2.50")) == Decimal("7.50")

    def test_invoice_amount_is_sum_of_items(self) -> None:
        invoice = _invoice((3, "2.50"), (2, "0.10"), due_date=NOW + timedelta(days=1))

        assert compute_invoice_amount(invoice.items) == Decimal("7.70")

    def test_normalize_recomputes_derived_fields(self) -> None:
        invoice = _invoice((3, "2.50"), (1, "4.00"), due_date=NOW + timedelta(days=1))
        invoice.amount = Decimal("999.99")
        invoice.items[0].amount = Decimal("1.00")

        normalize_invoice(invoice, now=NOW)

        assert [item.amount for item in invoice.items] == [Decimal("7.50"), Decimal("4.00")]
        assert [item.position for item in invoice.items] == [0, 1]
        assert invoice.amount == Decimal("11.50")
        assert invoice.status == InvoiceStatus.PENDING


class TestDueDateStatus:
    def test_pending_past_due_becomes_overdue(self) -> None:
        invoice = _invoice((1, "1.00"), due_date=NOW - timedelta(days=1))

        normalize_invoice(invoice, now=NOW)

        assert invoice.status == InvoiceStatus.OVERDUE

    def test_due_exactly_now_stays_pending(self) -> None:
        assert apply_due_date_status(InvoiceStatus.PENDING, NOW, NOW) == InvoiceStatus.PENDING

    @pytest.mark.parametrize(
        "status",
        [InvoiceStatus.PAID, InvoiceStatus.CANCELLED, InvoiceStatus.OVERDUE],
    )
    def test_terminal_and_overdue_statuses_are_untouched(self, status: str) -> None:
        assert apply_due_date_status(status, NOW - timedelta(days=30), NOW) == status

    def test_naive_due_date_is_treated_as_utc(self) -> None:
        naive = datetime(2026, 2, 28, 12, 0)

        assert apply_due_date_status(InvoiceStatus.PENDING, naive, NOW) == InvoiceStatus.OVERDUE


class TestStatusTargets:
    @pytest.mark.parametrize("target", ["paid", "cancelled", " PAID "])
    def test_owner_may_pay_or_cancel(self, target: str) -> None:
        assert validate_status_target(target, admin=False) in {"paid", "cancelled"}

    @pytest.mark.parametrize("target", ["pending", "overdue"])
    def test_owner_may_not_set_other_statuses(self, target: str) -> None:
        with pytest.raises(ValidationError):
            validate_status_target(target, admin=False)

    @pytest.mark.parametrize("target", ["pending", "paid", "overdue", "cancelled"])
    def test_admin_may_set_any_known_status(self, target: str) -> None:
        assert validate_status_target(target, admin=True) == target

    @pytest.mark.parametrize("target", ["archived", "", None])
    def test_unknown_status_is_rejected_for_everyone(self, target) -> None:
        with pytest.raises(ValidationError):
            validate_status_target(target, admin=True)


def test_invoice_number_format() -> None:
    assert format_invoice_number(1) == "INV00001"
    assert format_invoice_number(123456) == "INV123456"
