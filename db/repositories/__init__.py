"""
Repository layer exports.
"""

from db.repositories.campaign_repository import CampaignRepository
from db.repositories.errors import FileStorageError, PersistenceError, UploadValidationError
from db.repositories.invoice_repository import InvoiceRepository
from db.repositories.storage import FileStorageBackend, LocalFileStorage
from db.repositories.types import StoredFileMetadata, UploadFileInput

__all__ = [
    "CampaignRepository",
    "InvoiceRepository",
    "UploadFileInput",
    "StoredFileMetadata",
    "FileStorageBackend",
    "LocalFileStorage",
    "FileStorageError",
    "PersistenceError",
    "UploadValidationError",
]
