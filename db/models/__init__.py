"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.campaign import Campaign, CampaignStatus
from db.models.invoice import Invoice, InvoiceItem, InvoiceStatus

__all__ = [
    "Campaign",
    "CampaignStatus",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
]
