"""
app/services/invoice_service.py

Service layer for the invoice lifecycle: creation with sequential numbering,
edits, explicit status changes, and the overdue sweep.

Read paths (``get_invoice``, ``list_invoices``) run ``sweep_overdue`` before
querying, so a reader never observes a pending invoice whose due date has
passed. The sweep is one batched conditional UPDATE and is safe to run
concurrently with itself. It is not serialized against explicit status
changes; those use an optimistic update that matches the status they read.
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime
from functools import lru_cache

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_invoice_settings, get_listing_settings
from app.domain.errors import ConflictError, NotFoundError, ValidationError
from app.domain.ingestion import Page
from app.logging_utils import log_event
from app.schemas.invoice import InvoiceCreate, InvoiceItemInput, InvoiceUpdate
from app.services.invoice_lifecycle import (
    INVOICE_NUMBER_PREFIX,
    format_invoice_number,
    normalize_invoice,
    validate_status_target,
)
from app.validators.timestamps import ensure_utc
from db.base import utc_now
from db.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from db.repositories.errors import PersistenceError
from db.repositories.invoice_repository import InvoiceRepository

logger = logging.getLogger(__name__)


class InvoiceService:
    """
    Coordinates invoice normalization, numbering and persistence.
    """

    def __init__(
        self,
        *,
        number_max_attempts: int = 5,
        page_size_max: int = 100,
    ) -> None:
        self._number_max_attempts = max(1, number_max_attempts)
        self._page_size_max = max(1, page_size_max)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_invoice(
        self,
        *,
        db: Session,
        owner_id: uuid.UUID,
        payload: InvoiceCreate,
        now: datetime | None = None,
    ) -> Invoice:
        """
        Normalize and persist a new invoice, then commit.

        The number is ``INV`` + (highest sequence in use + 1), zero-padded to
        five digits, so numbers freed by deletes are never reused. Each insert
        runs in a savepoint; a collision with a concurrent writer bumps the
        candidate and retries, up to ``number_max_attempts`` times.
        """

        now = ensure_utc(now) if now is not None else utc_now()
        repository = InvoiceRepository(db)

        try:
            sequence = repository.max_number_sequence(prefix=INVOICE_NUMBER_PREFIX) + 1
            for attempt in range(1, self._number_max_attempts + 1):
                invoice = self._build_invoice(
                    owner_id=owner_id,
                    payload=payload,
                    invoice_number=format_invoice_number(sequence),
                    now=now,
                )
                try:
                    with db.begin_nested():
                        repository.add(invoice)
                except IntegrityError:
                    logger.info(
                        "Invoice number collision number=%s attempt=%s",
                        invoice.invoice_number,
                        attempt,
                    )
                    sequence += 1
                    continue

                db.commit()
                log_event(
                    logger,
                    logging.INFO,
                    "invoice_created",
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    owner_id=owner_id,
                    amount=invoice.amount,
                    status=invoice.status,
                )
                return invoice
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to persist invoice.") from exc

        db.rollback()
        raise ConflictError(
            f"Could not allocate a unique invoice number after {self._number_max_attempts} attempts."
        )

    def update_invoice(
        self,
        *,
        db: Session,
        invoice_id: uuid.UUID,
        owner_id: uuid.UUID,
        payload: InvoiceUpdate,
        now: datetime | None = None,
    ) -> Invoice:
        """
        Replace items, due date and notes, then re-run normalization.
        """

        now = ensure_utc(now) if now is not None else utc_now()
        invoice = self._get_owned_or_raise(db, invoice_id, owner_id)

        invoice.items = self._build_items(payload.items)
        invoice.due_date = payload.due_date
        invoice.notes = payload.notes
        normalize_invoice(invoice, now=now)

        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to update invoice.") from exc
        return invoice

    def change_status(
        self,
        *,
        db: Session,
        invoice_id: uuid.UUID,
        target: str,
        owner_id: uuid.UUID | None = None,
        admin: bool = False,
    ) -> Invoice:
        """
        Apply an explicit status change.

        Owners may set paid or cancelled on their own invoices; an
        administrative correction may set any of the four statuses on any
        invoice. Raises ``ConflictError`` when the status changed between
        the read and the conditional write.
        """

        status = validate_status_target(target, admin=admin)
        if not admin and owner_id is None:
            raise ValidationError("owner_id is required for owner status changes.")

        if admin:
            invoice = db.get(Invoice, invoice_id)
            if invoice is None:
                raise NotFoundError(f"Invoice not found: {invoice_id}")
        else:
            invoice = self._get_owned_or_raise(db, invoice_id, owner_id)

        current = invoice.status
        if current == status:
            return invoice

        repository = InvoiceRepository(db)
        try:
            updated = repository.update_status_if(
                invoice_id=invoice.id,
                expected_status=current,
                target_status=status,
                owner_id=None if admin else owner_id,
            )
            if not updated:
                db.rollback()
                raise ConflictError(
                    f"Invoice {invoice.invoice_number} changed status concurrently; retry the update."
                )
            db.commit()
            db.refresh(invoice)
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to update invoice status.") from exc

        log_event(
            logger,
            logging.INFO,
            "invoice_status_changed",
            invoice_id=invoice.id,
            from_status=current,
            to_status=status,
            admin=admin,
        )
        return invoice

    def mark_paid(self, *, db: Session, invoice_id: uuid.UUID, owner_id: uuid.UUID) -> Invoice:
        return self.change_status(
            db=db,
            invoice_id=invoice_id,
            owner_id=owner_id,
            target=InvoiceStatus.PAID,
        )

    def cancel(self, *, db: Session, invoice_id: uuid.UUID, owner_id: uuid.UUID) -> Invoice:
        return self.change_status(
            db=db,
            invoice_id=invoice_id,
            owner_id=owner_id,
            target=InvoiceStatus.CANCELLED,
        )

    def delete_invoice(self, *, db: Session, invoice_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        invoice = self._get_owned_or_raise(db, invoice_id, owner_id)
        try:
            InvoiceRepository(db).delete(invoice)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to delete invoice.") from exc

    def sweep_overdue(self, *, db: Session, now: datetime | None = None) -> None:
        """
        Mark every pending invoice past its due date as overdue.

        Idempotent: a second call with the same clock matches nothing.
        """

        now = ensure_utc(now) if now is not None else utc_now()
        try:
            updated = InvoiceRepository(db).mark_overdue(now=now)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Overdue sweep failed.") from exc

        # Loaded instances may still hold the pre-sweep status.
        db.expire_all()
        if updated:
            log_event(logger, logging.INFO, "invoice_overdue_sweep", updated=updated)

    # ------------------------------------------------------------------
    # Reads (sweep happens-before read)
    # ------------------------------------------------------------------

    def get_invoice(
        self,
        *,
        db: Session,
        invoice_id: uuid.UUID,
        owner_id: uuid.UUID,
        now: datetime | None = None,
    ) -> Invoice:
        self.sweep_overdue(db=db, now=now)
        return self._get_owned_or_raise(db, invoice_id, owner_id)

    def list_invoices(
        self,
        *,
        db: Session,
        owner_id: uuid.UUID,
        page: int = 1,
        limit: int = 10,
        status: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        now: datetime | None = None,
    ) -> Page[Invoice]:
        """
        Return one page of the owner's invoices, newest first.

        The creation-date filter applies only when both bounds are given. An
        unknown status filter raises ``ValidationError``.
        """

        status = validate_status_target(status, admin=True) if status else None
        self.sweep_overdue(db=db, now=now)

        page = max(1, page)
        limit = min(max(1, limit), self._page_size_max)
        repository = InvoiceRepository(db)
        filters = {
            "status": status,
            "created_from": ensure_utc(start_date) if start_date is not None else None,
            "created_to": ensure_utc(end_date) if end_date is not None else None,
        }
        invoices = repository.list_for_owner(
            owner_id,
            offset=(page - 1) * limit,
            limit=limit,
            **filters,
        )
        total = repository.count_for_owner(owner_id, **filters)
        return Page(
            items=invoices,
            total=total,
            current_page=page,
            total_pages=math.ceil(total / limit),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_invoice(
        self,
        *,
        owner_id: uuid.UUID,
        payload: InvoiceCreate,
        invoice_number: str,
        now: datetime,
    ) -> Invoice:
        invoice = Invoice(
            invoice_number=invoice_number,
            owner_id=owner_id,
            status=InvoiceStatus.PENDING,
            due_date=payload.due_date,
            notes=payload.notes,
            items=self._build_items(payload.items),
        )
        return normalize_invoice(invoice, now=now)

    @staticmethod
    def _build_items(items: list[InvoiceItemInput]) -> list[InvoiceItem]:
        return [
            InvoiceItem(
                position=position,
                description=item.description,
                quantity=item.quantity,
                price=item.price,
            )
            for position, item in enumerate(items)
        ]

    @staticmethod
    def _get_owned_or_raise(
        db: Session,
        invoice_id: uuid.UUID,
        owner_id: uuid.UUID | None,
    ) -> Invoice:
        invoice = (
            InvoiceRepository(db).get_owned(invoice_id, owner_id) if owner_id is not None else None
        )
        if invoice is None:
            raise NotFoundError(f"Invoice not found: {invoice_id}")
        return invoice


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_invoice_service() -> InvoiceService:
    """
    Build and cache the invoice service with env-driven settings.
    """

    settings = get_invoice_settings()
    return InvoiceService(
        number_max_attempts=settings.number_max_attempts,
        page_size_max=get_listing_settings().page_size_max,
    )
