"""
Invoice repository responsible for DB writes, lookups and batched status updates.

The caller controls commit/rollback; this repository never commits.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session

from db.models.invoice import Invoice, InvoiceStatus


class InvoiceRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def max_number_sequence(self, *, prefix: str) -> int:
        """
        Highest numeric suffix among invoice numbers starting with ``prefix``.

        Longer numbers sort after shorter ones, so ``INV100000`` outranks
        ``INV99999``.
        """

        stmt = (
            select(Invoice.invoice_number)
            .where(Invoice.invoice_number.startswith(prefix, autoescape=True))
            .order_by(func.length(Invoice.invoice_number).desc(), Invoice.invoice_number.desc())
            .limit(1)
        )
        number = self._session.scalar(stmt)
        if number is None:
            return 0
        suffix = number[len(prefix) :]
        return int(suffix) if suffix.isdigit() else 0

    def add(self, invoice: Invoice) -> Invoice:
        self._session.add(invoice)
        self._session.flush()
        return invoice

    def get_owned(self, invoice_id: uuid.UUID, owner_id: uuid.UUID) -> Invoice | None:
        stmt = select(Invoice).where(
            Invoice.id == invoice_id,
            Invoice.owner_id == owner_id,
        )
        return self._session.scalars(stmt).first()

    def list_for_owner(
        self,
        owner_id: uuid.UUID,
        *,
        status: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> list[Invoice]:
        stmt = self._owner_query(
            select(Invoice),
            owner_id,
            status=status,
            created_from=created_from,
            created_to=created_to,
        )
        stmt = stmt.order_by(Invoice.created_at.desc()).offset(max(0, offset)).limit(max(1, limit))
        return list(self._session.scalars(stmt).all())

    def count_for_owner(
        self,
        owner_id: uuid.UUID,
        *,
        status: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> int:
        stmt = self._owner_query(
            select(func.count()).select_from(Invoice),
            owner_id,
            status=status,
            created_from=created_from,
            created_to=created_to,
        )
        return int(self._session.scalar(stmt) or 0)

    def mark_overdue(self, *, now: datetime) -> int:
        """
        Single batched conditional write: pending and past due becomes overdue.
        """

        stmt = (
            update(Invoice)
            .where(
                Invoice.status == InvoiceStatus.PENDING,
                Invoice.due_date < now,
            )
            .values(status=InvoiceStatus.OVERDUE, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return int(result.rowcount or 0)

    def update_status_if(
        self,
        *,
        invoice_id: uuid.UUID,
        expected_status: str,
        target_status: str,
        owner_id: uuid.UUID | None = None,
    ) -> bool:
        """
        Optimistic status write; True only when the row still had ``expected_status``.
        """

        stmt = update(Invoice).where(
            Invoice.id == invoice_id,
            Invoice.status == expected_status,
        )
        if owner_id is not None:
            stmt = stmt.where(Invoice.owner_id == owner_id)
        stmt = stmt.values(status=target_status).execution_options(synchronize_session=False)
        result = self._session.execute(stmt)
        return bool(result.rowcount)

    def delete(self, invoice: Invoice) -> None:
        self._session.delete(invoice)
        self._session.flush()

    @staticmethod
    def _owner_query(
        stmt: Select[Any],
        owner_id: uuid.UUID,
        *,
        status: str | None,
        created_from: datetime | None,
        created_to: datetime | None,
    ) -> Select[Any]:
        stmt = stmt.where(Invoice.owner_id == owner_id)
        if status:
            stmt = stmt.where(Invoice.status == status)
        if created_from is not None and created_to is not None:
            stmt = stmt.where(
                Invoice.created_at >= created_from,
                Invoice.created_at <= created_to,
            )
        return stmt
