"""
app/domain/ingestion.py

Domain models used by the tabular ingestion flows.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RawRecord:
    """
    One decoded data row: column name to cell value.

    ``row_number`` is the physical line of the row in the source file
    (the header is line 1).
    """

    row_number: int
    values: dict[str, str]


@dataclass(frozen=True)
class RowImportError:
    """
    One rejected row with its original field values intact.
    """

    row_number: int
    original_record: dict[str, str]
    error_message: str


@dataclass(frozen=True)
class ImportedInvoice:
    """
    One row that was persisted as an invoice.
    """

    row_number: int
    invoice_id: uuid.UUID
    invoice_number: str
    amount: Decimal


@dataclass(frozen=True)
class InvoiceImportReport:
    """
    End-of-run per-record import report.

    ``error_count`` is exact even when ``error_details`` is capped.
    """

    success_count: int
    error_count: int
    error_details: list[RowImportError] = field(default_factory=list)
    succeeded: list[ImportedInvoice] = field(default_factory=list)


@dataclass(frozen=True)
class CampaignSummary:
    """
    Summary of a campaign created by bulk import.
    """

    id: uuid.UUID
    name: str
    description: str | None
    status: str
    total_records: int
    created_at: datetime


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    One page of a paginated listing.
    """

    items: list[T]
    total: int
    current_page: int
    total_pages: int
