"""
Campaign repository responsible for DB writes and lookup operations.

The caller controls commit/rollback; this repository never commits.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from db.models.campaign import Campaign, CampaignStatus


class CampaignRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, campaign: Campaign) -> Campaign:
        self._session.add(campaign)
        self._session.flush()
        return campaign

    def get(self, campaign_id: uuid.UUID) -> Campaign | None:
        return self._session.get(Campaign, campaign_id)

    def get_owned(self, campaign_id: uuid.UUID, owner_id: uuid.UUID) -> Campaign | None:
        stmt = select(Campaign).where(
            Campaign.id == campaign_id,
            Campaign.owner_id == owner_id,
        )
        return self._session.scalars(stmt).first()

    def list_for_owner(
        self,
        owner_id: uuid.UUID,
        *,
        offset: int = 0,
        limit: int = 10,
    ) -> list[Campaign]:
        stmt = (
            select(Campaign)
            .where(Campaign.owner_id == owner_id)
            .order_by(Campaign.created_at.desc())
            .offset(max(0, offset))
            .limit(max(1, limit))
        )
        return list(self._session.scalars(stmt).all())

    def count_for_owner(self, owner_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Campaign).where(Campaign.owner_id == owner_id)
        return int(self._session.scalar(stmt) or 0)

    def list_by_status(
        self,
        status: str,
        *,
        offset: int = 0,
        limit: int = 10,
    ) -> list[Campaign]:
        stmt = (
            select(Campaign)
            .where(Campaign.status == status)
            .order_by(Campaign.created_at.desc())
            .offset(max(0, offset))
            .limit(max(1, limit))
        )
        return list(self._session.scalars(stmt).all())

    def count_by_status(self, status: str) -> int:
        stmt = select(func.count()).select_from(Campaign).where(Campaign.status == status)
        return int(self._session.scalar(stmt) or 0)

    def list_all(self) -> list[Campaign]:
        stmt = select(Campaign).order_by(Campaign.created_at.asc())
        return list(self._session.scalars(stmt).all())

    def set_status_bulk(self, campaign_ids: Sequence[uuid.UUID], status: str) -> int:
        """
        Batched status write; returns the number of matched campaigns.

        Approval also clears any earlier rejection reason.
        """

        if not campaign_ids:
            return 0
        values: dict[str, str | None] = {"status": status}
        if status == CampaignStatus.APPROVED:
            values["rejection_reason"] = None
        stmt = (
            update(Campaign)
            .where(Campaign.id.in_(list(campaign_ids)))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return int(result.rowcount or 0)

    def delete(self, campaign: Campaign) -> None:
        self._session.delete(campaign)
        self._session.flush()
