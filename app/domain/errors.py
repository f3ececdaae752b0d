"""
app/domain/errors.py

Error taxonomy shared by ingestion and invoice lifecycle flows.
"""

from __future__ import annotations


class BillingIngestError(Exception):
    """Base exception for all core failures."""


class DecodeError(BillingIngestError):
    """
    Raised when a tabular stream cannot be read at all.

    Aborts the whole ingestion call.
    """


class ValidationError(BillingIngestError):
    """
    Raised when one row or payload violates a field constraint.
    """

    def __init__(
        self,
        message: str,
        *,
        row_number: int | None = None,
        column: str | None = None,
        value: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.row_number = row_number
        self.column = column
        self.value = value


class NotFoundError(BillingIngestError):
    """Raised when an aggregate does not exist or is not owned by the caller."""


class ConflictError(BillingIngestError):
    """Raised on uniqueness violations and lost optimistic updates."""


class StorageError(BillingIngestError):
    """Raised on I/O failures against the durable store or the staged-file area."""


class ImportCancelledError(BillingIngestError):
    """Raised when the caller's cancellation token fires mid-import."""
