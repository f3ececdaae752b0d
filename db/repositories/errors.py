"""
Repository-layer exceptions for persistence and staged-upload flows.
"""

from __future__ import annotations

from app.domain.errors import StorageError, ValidationError


class UploadValidationError(ValidationError):
    """Raised when an upload payload is rejected before staging."""


class FileStorageError(StorageError):
    """Raised when staging, reading or deleting an uploaded file fails."""


class PersistenceError(StorageError):
    """Raised when the durable store rejects or fails a write."""
