"""
tests/test_campaign_import_service.py

Pytest tests for bulk campaign import (all-or-nothing per file).
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.domain.cancellation import CancellationToken
from app.domain.errors import DecodeError, ImportCancelledError, ValidationError
from app.schemas.campaign import CampaignSummaryResponse
from app.services.campaign_import_service import CampaignImportService
from db.models.campaign import Campaign, CampaignStatus
from db.repositories.storage import LocalFileStorage


@pytest.fixture()
def importer(storage: LocalFileStorage) -> CampaignImportService:
    return CampaignImportService(storage_backend=storage, max_records=3)


def _campaign_count(db: Session) -> int:
    return int(db.scalar(select(func.count()).select_from(Campaign)) or 0)


def test_creates_pending_campaign_with_full_dataset(
    importer: CampaignImportService,
    upload_root: Path,
    db: Session,
    owner_id: uuid.UUID,
) -> None:
    summary = importer.import_campaign(
        db=db,
        owner_id=owner_id,
        name="  Spring outreach ",
        description="Q2 list",
        file_name="contacts.csv",
        content=b"email,city\na@example.com,Oslo\nb@example.com\n",
    )

    campaign = db.get(Campaign, summary.id)
    assert summary.name == "Spring outreach"
    assert summary.status == CampaignStatus.PENDING
    assert summary.total_records == 2
    assert campaign.dataset == [
        {"email": "a@example.com", "city": "Oslo"},
        {"email": "b@example.com"},
    ]
    assert campaign.file_name == "contacts.csv"
    assert (upload_root / campaign.file_path).is_file()

    response = CampaignSummaryResponse.model_validate(summary, from_attributes=True)
    assert response.id == summary.id
    assert response.total_records == 2
    assert response.description == "Q2 list"


def test_empty_dataset_creates_campaign_with_zero_records(
    importer: CampaignImportService,
    db: Session,
    owner_id: uuid.UUID,
) -> None:
    summary = importer.import_campaign(
        db=db,
        owner_id=owner_id,
        name="Empty",
        file_name="empty.csv",
        content=b"email,city\n",
    )

    assert summary.total_records == 0
    assert db.get(Campaign, summary.id).dataset == []


def test_name_is_required(
    importer: CampaignImportService,
    db: Session,
    owner_id: uuid.UUID,
    staged_files: Callable[[], list[Path]],
) -> None:
    with pytest.raises(ValidationError):
        importer.import_campaign(db=db, owner_id=owner_id, name="  ", file_name="a.csv", content=b"a\n1\n")

    assert staged_files() == []


def test_too_many_records_fails_whole_import(
    importer: CampaignImportService,
    db: Session,
    owner_id: uuid.UUID,
    staged_files: Callable[[], list[Path]],
) -> None:
    with pytest.raises(ValidationError):
        importer.import_campaign(
            db=db,
            owner_id=owner_id,
            name="Too big",
            file_name="big.csv",
            content=b"email\n1\n2\n3\n4\n",
        )

    assert _campaign_count(db) == 0
    assert staged_files() == []


def test_decode_failure_leaves_nothing_behind(
    importer: CampaignImportService,
    db: Session,
    owner_id: uuid.UUID,
    staged_files: Callable[[], list[Path]],
) -> None:
    with pytest.raises(DecodeError):
        importer.import_campaign(
            db=db,
            owner_id=owner_id,
            name="Broken",
            file_name="broken.csv",
            content=b"email\n\xff\xfe\n",
        )

    assert _campaign_count(db) == 0
    assert staged_files() == []


def test_cancellation_leaves_nothing_behind(
    importer: CampaignImportService,
    db: Session,
    owner_id: uuid.UUID,
    staged_files: Callable[[], list[Path]],
) -> None:
    token = CancellationToken()
    token.cancel()

    with pytest.raises(ImportCancelledError):
        importer.import_campaign(
            db=db,
            owner_id=owner_id,
            name="Cancelled",
            file_name="contacts.csv",
            content=b"email\na@example.com\n",
            cancel_token=token,
        )

    assert _campaign_count(db) == 0
    assert staged_files() == []
