"""
app/services/campaign_service.py

Owner and reviewer operations on persisted campaigns.

Status ownership:
    owner     -> pending, processing, completed, failed
    reviewer  -> approved, rejected
"""

from __future__ import annotations

import csv
import io
import logging
import math
import uuid
from collections.abc import Sequence
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_listing_settings, get_staging_settings
from app.domain.errors import NotFoundError, ValidationError
from app.domain.ingestion import Page
from app.logging_utils import log_event
from app.schemas.campaign import CampaignUpdate
from app.services.campaign_normalizer import normalize_campaign
from db.models.campaign import (
    OWNER_CAMPAIGN_STATUSES,
    REVIEW_CAMPAIGN_STATUSES,
    Campaign,
    CampaignStatus,
)
from db.repositories.campaign_repository import CampaignRepository
from db.repositories.errors import FileStorageError, PersistenceError
from db.repositories.storage import FileStorageBackend, LocalFileStorage

logger = logging.getLogger(__name__)

EXPORT_HEADER: tuple[str, ...] = (
    "Campaign ID",
    "Name",
    "Description",
    "Owner",
    "Status",
    "Created At",
)


class CampaignService:
    def __init__(
        self,
        *,
        storage_backend: FileStorageBackend | None = None,
        page_size_max: int = 100,
    ) -> None:
        self._storage = storage_backend or LocalFileStorage()
        self._page_size_max = max(1, page_size_max)

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def list_campaigns(
        self,
        *,
        db: Session,
        owner_id: uuid.UUID,
        page: int = 1,
        limit: int = 10,
    ) -> Page[Campaign]:
        page, limit = self._clamp_paging(page, limit)
        repository = CampaignRepository(db)
        campaigns = repository.list_for_owner(owner_id, offset=(page - 1) * limit, limit=limit)
        return self._page(campaigns, repository.count_for_owner(owner_id), page, limit)

    def get_campaign(self, *, db: Session, campaign_id: uuid.UUID, owner_id: uuid.UUID) -> Campaign:
        campaign = CampaignRepository(db).get_owned(campaign_id, owner_id)
        if campaign is None:
            raise NotFoundError(f"Campaign not found: {campaign_id}")
        return campaign

    def update_campaign(
        self,
        *,
        db: Session,
        campaign_id: uuid.UUID,
        owner_id: uuid.UUID,
        changes: CampaignUpdate,
    ) -> Campaign:
        """
        Apply owner edits. ``total_records`` is re-derived from the dataset.
        """

        campaign = self.get_campaign(db=db, campaign_id=campaign_id, owner_id=owner_id)
        fields = changes.model_dump(exclude_unset=True)

        if "status" in fields:
            status = (fields["status"] or "").strip().lower()
            if status not in OWNER_CAMPAIGN_STATUSES:
                allowed = ", ".join(sorted(OWNER_CAMPAIGN_STATUSES))
                raise ValidationError(
                    f"Invalid status. Allowed values: {allowed}.",
                    column="status",
                    value=fields["status"],
                )
            campaign.status = status
        if fields.get("name") is not None:
            campaign.name = fields["name"]
        if "description" in fields:
            campaign.description = fields["description"] or None
        if fields.get("dataset") is not None:
            campaign.dataset = [dict(row) for row in fields["dataset"]]

        normalize_campaign(campaign)
        self._commit(db, "Failed to update campaign.")
        return campaign

    def delete_campaign(self, *, db: Session, campaign_id: uuid.UUID, owner_id: uuid.UUID) -> None:
        """
        Delete the campaign with its dataset, then release its retained upload.
        """

        campaign = self.get_campaign(db=db, campaign_id=campaign_id, owner_id=owner_id)
        file_path = campaign.file_path
        try:
            CampaignRepository(db).delete(campaign)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to delete campaign.") from exc

        if file_path:
            try:
                self._storage.delete(storage_path=file_path)
            except FileStorageError as exc:
                logger.error("Failed to delete campaign upload path=%s: %s", file_path, exc)

    # ------------------------------------------------------------------
    # Reviewer operations
    # ------------------------------------------------------------------

    def list_pending_campaigns(self, *, db: Session, page: int = 1, limit: int = 10) -> Page[Campaign]:
        page, limit = self._clamp_paging(page, limit)
        repository = CampaignRepository(db)
        campaigns = repository.list_by_status(
            CampaignStatus.PENDING,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return self._page(campaigns, repository.count_by_status(CampaignStatus.PENDING), page, limit)

    def review_campaign(
        self,
        *,
        db: Session,
        campaign_id: uuid.UUID,
        status: str,
        reason: str | None = None,
    ) -> Campaign:
        normalized = (status or "").strip().lower()
        if normalized not in REVIEW_CAMPAIGN_STATUSES:
            allowed = ", ".join(sorted(REVIEW_CAMPAIGN_STATUSES))
            raise ValidationError(
                f"Invalid review status. Allowed values: {allowed}.",
                column="status",
                value=status,
            )

        campaign = CampaignRepository(db).get(campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign not found: {campaign_id}")

        campaign.status = normalized
        if normalized == CampaignStatus.APPROVED:
            campaign.rejection_reason = None
        elif reason:
            campaign.rejection_reason = reason.strip()
        normalize_campaign(campaign)
        self._commit(db, "Failed to record campaign review.")

        log_event(
            logger,
            logging.INFO,
            "campaign_reviewed",
            campaign_id=campaign.id,
            status=normalized,
        )
        return campaign

    def bulk_approve(self, *, db: Session, campaign_ids: Sequence[uuid.UUID]) -> int:
        """
        Approve every listed campaign in one batched write; returns matches.
        """

        try:
            approved = CampaignRepository(db).set_status_bulk(campaign_ids, CampaignStatus.APPROVED)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Bulk campaign approval failed.") from exc

        db.expire_all()
        log_event(logger, logging.INFO, "campaigns_bulk_approved", requested=len(campaign_ids), approved=approved)
        return approved

    def record_review_progress(
        self,
        *,
        db: Session,
        campaign_id: uuid.UUID,
        processed_records: int,
        error_records: int,
    ) -> Campaign:
        campaign = CampaignRepository(db).get(campaign_id)
        if campaign is None:
            raise NotFoundError(f"Campaign not found: {campaign_id}")

        normalize_campaign(campaign)
        if processed_records < 0 or error_records < 0:
            raise ValidationError("Record counters cannot be negative.")
        if processed_records + error_records > campaign.total_records:
            raise ValidationError(
                "processed_records + error_records cannot exceed total_records "
                f"({campaign.total_records})."
            )

        campaign.processed_records = processed_records
        campaign.error_records = error_records
        self._commit(db, "Failed to record campaign progress.")
        return campaign

    def export_campaigns_csv(self, *, db: Session) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)
        for campaign in CampaignRepository(db).list_all():
            writer.writerow(
                [
                    str(campaign.id),
                    campaign.name,
                    campaign.description or "",
                    str(campaign.owner_id),
                    campaign.status,
                    campaign.created_at.isoformat() if campaign.created_at else "",
                ]
            )
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _clamp_paging(self, page: int, limit: int) -> tuple[int, int]:
        return max(1, page), min(max(1, limit), self._page_size_max)

    @staticmethod
    def _page(items: list[Campaign], total: int, page: int, limit: int) -> Page[Campaign]:
        return Page(
            items=items,
            total=total,
            current_page=page,
            total_pages=math.ceil(total / limit),
        )

    @staticmethod
    def _commit(db: Session, message: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(message) from exc


@lru_cache(maxsize=1)
def get_campaign_service() -> CampaignService:
    """
    Build and cache the campaign service with env-driven settings.
    """

    return CampaignService(
        storage_backend=LocalFileStorage(get_staging_settings().upload_dir),
        page_size_max=get_listing_settings().page_size_max,
    )
