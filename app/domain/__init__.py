"""
app/domain package marker.
"""

from app.domain.cancellation import CancellationToken
from app.domain.errors import (
    BillingIngestError,
    ConflictError,
    DecodeError,
    ImportCancelledError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from app.domain.ingestion import (
    CampaignSummary,
    ImportedInvoice,
    InvoiceImportReport,
    Page,
    RawRecord,
    RowImportError,
)

__all__ = [
    "BillingIngestError",
    "CampaignSummary",
    "CancellationToken",
    "ConflictError",
    "DecodeError",
    "ImportCancelledError",
    "ImportedInvoice",
    "InvoiceImportReport",
    "NotFoundError",
    "Page",
    "RawRecord",
    "RowImportError",
    "StorageError",
    "ValidationError",
]
