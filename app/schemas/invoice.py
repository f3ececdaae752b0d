"""
app/schemas/invoice.py

Payload and response schemas for invoices.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.validators.timestamps import parse_timestamp


class InvoiceItemInput(BaseModel):
    """
    One client-supplied line item. Any ``amount`` sent by the client is ignored.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(..., min_length=1, max_length=500)
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)


class InvoiceCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    items: list[InvoiceItemInput] = Field(..., min_length=1)
    due_date: datetime
    notes: str | None = None

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value: Any) -> datetime:
        return parse_timestamp(value)

    @field_validator("notes")
    @classmethod
    def _blank_notes_to_none(cls, value: str | None) -> str | None:
        return value or None


class InvoiceUpdate(InvoiceCreate):
    """
    Full replacement of the client-editable invoice fields.
    """


class InvoiceRowErrorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    row_number: int = Field(..., ge=1)
    original_record: dict[str, str]
    error_message: str


class ImportedInvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    row_number: int = Field(..., ge=1)
    invoice_id: UUID
    invoice_number: str
    amount: Decimal


class InvoiceImportReportResponse(BaseModel):
    """
    Wire shape of a per-record import report.
    """

    model_config = ConfigDict(from_attributes=True)

    success_count: int = Field(..., ge=0)
    error_count: int = Field(..., ge=0)
    error_details: list[InvoiceRowErrorResponse] = Field(default_factory=list)
    succeeded: list[ImportedInvoiceResponse] = Field(default_factory=list)
