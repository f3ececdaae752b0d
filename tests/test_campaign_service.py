"""
tests/test_campaign_service.py

Pytest tests for owner and reviewer operations on campaigns.
"""

from __future__ import annotations

import csv
import io
import uuid
from collections.abc import Callable
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from app.domain.errors import NotFoundError, ValidationError
from app.schemas.campaign import CampaignUpdate
from app.services.campaign_import_service import CampaignImportService
from app.services.campaign_service import EXPORT_HEADER, CampaignService
from db.models.campaign import Campaign, CampaignStatus
from db.repositories.storage import LocalFileStorage


@pytest.fixture()
def service(storage: LocalFileStorage) -> CampaignService:
    return CampaignService(storage_backend=storage, page_size_max=2)


@pytest.fixture()
def make_campaign(
    storage: LocalFileStorage,
    db: Session,
    owner_id: uuid.UUID,
) -> Callable[..., Campaign]:
    importer = CampaignImportService(storage_backend=storage)

    def _make(name: str = "Outreach", content: bytes = b"email\na@example.com\nb@example.com\n") -> Campaign:
        summary = importer.import_campaign(
            db=db,
            owner_id=owner_id,
            name=name,
            file_name="contacts.csv",
            content=content,
        )
        return db.get(Campaign, summary.id)

    return _make


class TestOwnerOperations:
    def test_list_is_paginated_and_owner_scoped(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
        owner_id: uuid.UUID,
    ) -> None:
        for index in range(3):
            make_campaign(name=f"Campaign {index}")

        page = service.list_campaigns(db=db, owner_id=owner_id, page=1, limit=10)
        other = service.list_campaigns(db=db, owner_id=uuid.uuid4())

        assert len(page.items) == 2
        assert page.total == 3
        assert page.total_pages == 2
        assert other.total == 0

    def test_get_other_owner_raises_not_found(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
    ) -> None:
        campaign = make_campaign()

        with pytest.raises(NotFoundError):
            service.get_campaign(db=db, campaign_id=campaign.id, owner_id=uuid.uuid4())

    def test_update_dataset_rederives_total_records(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
        owner_id: uuid.UUID,
    ) -> None:
        campaign = make_campaign()

        updated = service.update_campaign(
            db=db,
            campaign_id=campaign.id,
            owner_id=owner_id,
            changes=CampaignUpdate(
                name="Renamed",
                status="processing",
                dataset=[{"email": "x@example.com"}],
            ),
        )

        assert updated.name == "Renamed"
        assert updated.status == CampaignStatus.PROCESSING
        assert updated.total_records == 1

    def test_owner_cannot_approve(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
        owner_id: uuid.UUID,
    ) -> None:
        campaign = make_campaign()

        with pytest.raises(ValidationError):
            service.update_campaign(
                db=db,
                campaign_id=campaign.id,
                owner_id=owner_id,
                changes=CampaignUpdate(status="approved"),
            )

    def test_update_rejects_unknown_fields(self) -> None:
        with pytest.raises(PydanticValidationError):
            CampaignUpdate(total_records=99)

    def test_delete_releases_retained_upload(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
        owner_id: uuid.UUID,
        staged_files: Callable[[], list[Path]],
    ) -> None:
        campaign = make_campaign()
        assert len(staged_files()) == 1

        service.delete_campaign(db=db, campaign_id=campaign.id, owner_id=owner_id)

        assert db.get(Campaign, campaign.id) is None
        assert staged_files() == []


class TestReviewerOperations:
    def test_pending_listing(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
    ) -> None:
        first = make_campaign()
        make_campaign()
        service.review_campaign(db=db, campaign_id=first.id, status="approved")

        page = service.list_pending_campaigns(db=db)

        assert page.total == 1

    def test_reject_records_reason(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
    ) -> None:
        campaign = make_campaign()

        reviewed = service.review_campaign(
            db=db,
            campaign_id=campaign.id,
            status="Rejected",
            reason=" duplicate list ",
        )

        assert reviewed.status == CampaignStatus.REJECTED
        assert reviewed.rejection_reason == "duplicate list"

    def test_approval_clears_earlier_rejection_reason(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
    ) -> None:
        campaign = make_campaign()
        service.review_campaign(db=db, campaign_id=campaign.id, status="rejected", reason="bad data")

        reviewed = service.review_campaign(db=db, campaign_id=campaign.id, status="approved")

        assert reviewed.status == CampaignStatus.APPROVED
        assert reviewed.rejection_reason is None

    @pytest.mark.parametrize("status", ["completed", "pending", "archived"])
    def test_review_only_sets_review_statuses(
        self,
        status: str,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
    ) -> None:
        campaign = make_campaign()

        with pytest.raises(ValidationError):
            service.review_campaign(db=db, campaign_id=campaign.id, status=status)

    def test_review_missing_campaign(self, service: CampaignService, db: Session) -> None:
        with pytest.raises(NotFoundError):
            service.review_campaign(db=db, campaign_id=uuid.uuid4(), status="approved")

    def test_bulk_approve(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
    ) -> None:
        first = make_campaign()
        second = make_campaign()
        service.review_campaign(db=db, campaign_id=second.id, status="rejected", reason="bad data")

        approved = service.bulk_approve(db=db, campaign_ids=[first.id, second.id, uuid.uuid4()])

        assert approved == 2
        assert db.get(Campaign, first.id).status == CampaignStatus.APPROVED
        assert db.get(Campaign, second.id).status == CampaignStatus.APPROVED
        assert db.get(Campaign, second.id).rejection_reason is None

    def test_bulk_approve_empty_list(self, service: CampaignService, db: Session) -> None:
        assert service.bulk_approve(db=db, campaign_ids=[]) == 0

    def test_record_review_progress(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
    ) -> None:
        campaign = make_campaign()

        updated = service.record_review_progress(
            db=db,
            campaign_id=campaign.id,
            processed_records=1,
            error_records=1,
        )

        assert (updated.processed_records, updated.error_records) == (1, 1)

    def test_review_progress_cannot_exceed_total(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
    ) -> None:
        campaign = make_campaign()

        with pytest.raises(ValidationError):
            service.record_review_progress(
                db=db,
                campaign_id=campaign.id,
                processed_records=2,
                error_records=1,
            )

    def test_export_csv(
        self,
        service: CampaignService,
        make_campaign: Callable[..., Campaign],
        db: Session,
        owner_id: uuid.UUID,
    ) -> None:
        campaign = make_campaign(name="Export, me")

        rows = list(csv.reader(io.StringIO(service.export_campaigns_csv(db=db))))

        assert tuple(rows[0]) == EXPORT_HEADER
        assert rows[1][:5] == [str(campaign.id), "Export, me", "", str(owner_id), "pending"]
