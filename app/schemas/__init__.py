"""
app/schemas package marker.
"""

from app.schemas.campaign import CampaignSummaryResponse, CampaignUpdate
from app.schemas.invoice import (
    ImportedInvoiceResponse,
    InvoiceCreate,
    InvoiceImportReportResponse,
    InvoiceItemInput,
    InvoiceRowErrorResponse,
    InvoiceUpdate,
)

__all__ = [
    "CampaignSummaryResponse",
    "CampaignUpdate",
    "ImportedInvoiceResponse",
    "InvoiceCreate",
    "InvoiceImportReportResponse",
    "InvoiceItemInput",
    "InvoiceRowErrorResponse",
    "InvoiceUpdate",
]
