"""
app/services package marker.
"""

from app.services.campaign_import_service import (
    CampaignImportService,
    get_campaign_import_service,
)
from app.services.campaign_service import CampaignService, get_campaign_service
from app.services.invoice_import_service import (
    InvoiceImportService,
    get_invoice_import_service,
)
from app.services.invoice_service import InvoiceService, get_invoice_service

__all__ = [
    "CampaignImportService",
    "get_campaign_import_service",
    "CampaignService",
    "get_campaign_service",
    "InvoiceImportService",
    "get_invoice_import_service",
    "InvoiceService",
    "get_invoice_service",
]
