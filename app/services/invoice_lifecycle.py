"""
app/services/invoice_lifecycle.py

Pure derived-field and status rules for invoices.

Every validating write path calls ``normalize_invoice`` explicitly before
persistence; there are no ORM event hooks. After normalization:

    item.amount    == item.quantity * item.price   (for every item)
    invoice.amount == sum(item.amount)
    status         == overdue  if it was pending and due_date < now

Status rules:

    pending  -> overdue      automatic, when due_date has passed
    any      -> paid         owner action
    any      -> cancelled    owner action
    any      -> any          administrative correction (closed set only)

Nothing ever leaves paid, overdue or cancelled automatically.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from app.domain.errors import ValidationError
from app.validators.timestamps import ensure_utc
from db.models.invoice import INVOICE_STATUSES, Invoice, InvoiceItem, InvoiceStatus

CENT = Decimal("0.01")
INVOICE_NUMBER_PREFIX = "INV"

OWNER_TARGET_STATUSES = frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED})


def compute_item_amount(quantity: int, price: Decimal) -> Decimal:
    return (Decimal(quantity) * Decimal(price)).quantize(CENT)


def compute_invoice_amount(items: Iterable[InvoiceItem]) -> Decimal:
    total = sum((compute_item_amount(item.quantity, item.price) for item in items), Decimal("0"))
    return total.quantize(CENT)


def apply_due_date_status(status: str, due_date: datetime, now: datetime) -> str:
    """
    Return ``overdue`` for a pending invoice past its due date, else ``status``.
    """

    if status == InvoiceStatus.PENDING and ensure_utc(due_date) < ensure_utc(now):
        return InvoiceStatus.OVERDUE
    return status


def normalize_invoice(invoice: Invoice, *, now: datetime) -> Invoice:
    """
    Recompute every derived field on ``invoice`` in place and return it.
    """

    for position, item in enumerate(invoice.items):
        item.position = position
        item.amount = compute_item_amount(item.quantity, item.price)
    invoice.amount = compute_invoice_amount(invoice.items)
    invoice.status = apply_due_date_status(
        invoice.status or InvoiceStatus.PENDING,
        invoice.due_date,
        now,
    )
    return invoice


def validate_status_target(target: str, *, admin: bool) -> str:
    """
    Check an explicit status change against the closed set and the actor.
    """

    normalized = (target or "").strip().lower()
    if normalized not in INVOICE_STATUSES:
        allowed = ", ".join(sorted(INVOICE_STATUSES))
        raise ValidationError(
            f"Invalid status. Allowed values: {allowed}.",
            column="status",
            value=target,
        )
    if not admin and normalized not in OWNER_TARGET_STATUSES:
        allowed = ", ".join(sorted(OWNER_TARGET_STATUSES))
        raise ValidationError(
            f"Owners may only set status to: {allowed}.",
            column="status",
            value=target,
        )
    return normalized


def format_invoice_number(sequence: int) -> str:
    return f"{INVOICE_NUMBER_PREFIX}{sequence:05d}"
