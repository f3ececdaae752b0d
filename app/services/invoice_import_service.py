"""
app/services/invoice_import_service.py

Per-record import: every decoded row becomes an independent invoice.

Each row is its own unit of work. A row that fails validation or
persistence is recorded in the report with its original cells and the run
continues. Any other failure (unreadable input, cancellation, an unexpected
fault) aborts the call.

The staged upload is deleted exactly once on every exit path.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from functools import lru_cache

from sqlalchemy.orm import Session

from app.config import get_invoice_import_settings, get_staging_settings
from app.domain.cancellation import CancellationToken
from app.domain.errors import StorageError, ValidationError
from app.domain.ingestion import ImportedInvoice, InvoiceImportReport, RowImportError
from app.logging_utils import log_event
from app.parsing.tabular_decoder import TabularDecoder
from app.services.invoice_service import InvoiceService, get_invoice_service
from app.validators.invoice_row_validator import InvoiceRowValidator
from app.validators.timestamps import ensure_utc
from db.base import utc_now
from db.repositories.errors import FileStorageError
from db.repositories.storage import FileStorageBackend, LocalFileStorage
from db.repositories.types import UploadFileInput
from db.repositories.validators import DEFAULT_MAX_UPLOAD_BYTES, validate_upload_payload

logger = logging.getLogger(__name__)


class InvoiceImportService:
    """
    Coordinates staging, decoding, row validation and per-row persistence.
    """

    def __init__(
        self,
        *,
        storage_backend: FileStorageBackend | None = None,
        invoice_service: InvoiceService | None = None,
        decoder: TabularDecoder | None = None,
        validator: InvoiceRowValidator | None = None,
        max_error_details: int = 500,
        log_row_errors: bool = True,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self._storage = storage_backend or LocalFileStorage()
        self._invoice_service = invoice_service or InvoiceService()
        self._decoder = decoder or TabularDecoder()
        self._validator = validator or InvoiceRowValidator()
        self._max_error_details = max(1, max_error_details)
        self._log_row_errors = log_row_errors
        self._max_upload_bytes = max_upload_bytes

    def import_invoices(
        self,
        *,
        db: Session,
        owner_id: uuid.UUID,
        file_name: str,
        content: bytes,
        content_type: str | None = None,
        cancel_token: CancellationToken | None = None,
        now: datetime | None = None,
    ) -> InvoiceImportReport:
        """
        Import one invoice per decoded row.

        Args:
            db:            Active SQLAlchemy session; each row is committed
                           on its own.
            owner_id:      Owner of every created invoice.
            file_name:     Original upload name (must be ``.csv``).
            content:       Raw upload bytes.
            content_type:  Optional MIME type reported by the client.
            cancel_token:  Optional cancellation/timeout bound, checked per row.
            now:           Clock override for due-date defaults and status.

        Returns:
            Report with exact success/error counts, per-row error details in
            input order (capped), and the created invoices tagged with their
            row numbers.
        """

        validate_upload_payload(
            UploadFileInput(
                owner_id=owner_id,
                file_name=file_name,
                content=content,
                content_type=content_type,
            ),
            max_bytes=self._max_upload_bytes,
        )
        stored = self._storage.save(
            owner_id=owner_id,
            file_name=file_name,
            content=content,
            content_type=content_type,
        )

        succeeded: list[ImportedInvoice] = []
        error_details: list[RowImportError] = []
        error_count = 0

        try:
            with self._storage.open(storage_path=stored.storage_path) as handle:
                for record in self._decoder.decode(handle, cancel_token=cancel_token):
                    row_now = ensure_utc(now) if now is not None else utc_now()
                    try:
                        payload = self._validator.validate(record, now=row_now)
                        invoice = self._invoice_service.create_invoice(
                            db=db,
                            owner_id=owner_id,
                            payload=payload,
                            now=row_now,
                        )
                    except (ValidationError, StorageError) as exc:
                        error_count += 1
                        self._record_error(
                            error_details,
                            RowImportError(
                                row_number=record.row_number,
                                original_record=dict(record.values),
                                error_message=str(exc),
                            ),
                        )
                        continue

                    succeeded.append(
                        ImportedInvoice(
                            row_number=record.row_number,
                            invoice_id=invoice.id,
                            invoice_number=invoice.invoice_number,
                            amount=invoice.amount,
                        )
                    )
        finally:
            self._release_staged_file(stored.storage_path)

        log_event(
            logger,
            logging.INFO,
            "invoice_import_completed",
            owner_id=owner_id,
            file_name=stored.file_name,
            success_count=len(succeeded),
            error_count=error_count,
        )
        return InvoiceImportReport(
            success_count=len(succeeded),
            error_count=error_count,
            error_details=error_details,
            succeeded=succeeded,
        )

    def _record_error(
        self,
        error_details: list[RowImportError],
        error: RowImportError,
    ) -> None:
        if self._log_row_errors:
            logger.warning(
                "Invoice import row rejected row=%s message=%s record=%r",
                error.row_number,
                error.error_message,
                error.original_record,
            )

        if len(error_details) < self._max_error_details:
            error_details.append(error)

    def _release_staged_file(self, storage_path: str) -> None:
        try:
            self._storage.delete(storage_path=storage_path)
        except FileStorageError as exc:
            logger.error("Failed to release staged upload path=%s: %s", storage_path, exc)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_invoice_import_service() -> InvoiceImportService:
    """
    Build and cache the invoice import service with env-driven settings.
    """

    staging = get_staging_settings()
    settings = get_invoice_import_settings()
    return InvoiceImportService(
        storage_backend=LocalFileStorage(staging.upload_dir),
        invoice_service=get_invoice_service(),
        validator=InvoiceRowValidator(default_due_days=settings.default_due_days),
        max_error_details=settings.max_error_details,
        log_row_errors=settings.log_row_errors,
        max_upload_bytes=staging.max_upload_bytes,
    )
