"""
app/services/campaign_import_service.py

Bulk import: one uploaded file becomes one campaign holding every decoded row.

Atomicity is per file. Either the campaign exists with its full dataset and
the staged upload is retained (its path recorded on the campaign), or
nothing was created and the staged upload is deleted.
"""

from __future__ import annotations

import logging
import uuid
from functools import lru_cache

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_campaign_import_settings, get_staging_settings
from app.domain.cancellation import CancellationToken
from app.domain.errors import ValidationError
from app.domain.ingestion import CampaignSummary
from app.logging_utils import log_event
from app.parsing.tabular_decoder import TabularDecoder
from app.services.campaign_normalizer import normalize_campaign
from db.models.campaign import Campaign, CampaignStatus
from db.repositories.campaign_repository import CampaignRepository
from db.repositories.errors import FileStorageError, PersistenceError
from db.repositories.storage import FileStorageBackend, LocalFileStorage
from db.repositories.types import UploadFileInput
from db.repositories.validators import DEFAULT_MAX_UPLOAD_BYTES, validate_upload_payload

logger = logging.getLogger(__name__)


class CampaignImportService:
    """
    Stages an upload, decodes it fully, and persists one campaign.
    """

    def __init__(
        self,
        *,
        storage_backend: FileStorageBackend | None = None,
        decoder: TabularDecoder | None = None,
        max_records: int = 100_000,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self._storage = storage_backend or LocalFileStorage()
        self._decoder = decoder or TabularDecoder()
        self._max_records = max(1, max_records)
        self._max_upload_bytes = max_upload_bytes

    def import_campaign(
        self,
        *,
        db: Session,
        owner_id: uuid.UUID,
        name: str,
        file_name: str,
        content: bytes,
        description: str | None = None,
        content_type: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> CampaignSummary:
        """
        Create one pending campaign whose dataset is the whole decoded file.

        Transaction safety:
        - The campaign insert runs in one transaction.
        - On any failure after staging, the staged file is deleted as a
          compensating action and the error is re-raised.
        """

        campaign_name = (name or "").strip()
        if not campaign_name:
            raise ValidationError("Campaign name is required.", column="name")

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

        try:
            with self._storage.open(storage_path=stored.storage_path) as handle:
                dataset = [
                    dict(record.values)
                    for record in self._decoder.decode(handle, cancel_token=cancel_token)
                ]
            if len(dataset) > self._max_records:
                raise ValidationError(
                    f"Campaign dataset has {len(dataset)} records; the limit is {self._max_records}.",
                )

            campaign = Campaign(
                owner_id=owner_id,
                name=campaign_name,
                description=(description or "").strip() or None,
                status=CampaignStatus.PENDING,
                dataset=dataset,
                file_name=stored.file_name,
                file_path=stored.storage_path,
            )
            normalize_campaign(campaign)
            CampaignRepository(db).add(campaign)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            self._delete_staged_file_quietly(stored.storage_path)
            raise PersistenceError("Failed to persist campaign.") from exc
        except Exception:
            db.rollback()
            self._delete_staged_file_quietly(stored.storage_path)
            raise

        log_event(
            logger,
            logging.INFO,
            "campaign_imported",
            campaign_id=campaign.id,
            owner_id=owner_id,
            total_records=campaign.total_records,
            file_name=stored.file_name,
        )
        return CampaignSummary(
            id=campaign.id,
            name=campaign.name,
            description=campaign.description,
            status=campaign.status,
            total_records=campaign.total_records,
            created_at=campaign.created_at,
        )

    def _delete_staged_file_quietly(self, storage_path: str) -> None:
        try:
            self._storage.delete(storage_path=storage_path)
        except FileStorageError as exc:
            logger.error("Failed to delete staged upload path=%s: %s", storage_path, exc)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_campaign_import_service() -> CampaignImportService:
    """
    Build and cache the campaign import service with env-driven settings.
    """

    staging = get_staging_settings()
    settings = get_campaign_import_settings()
    return CampaignImportService(
        storage_backend=LocalFileStorage(staging.upload_dir),
        max_records=settings.max_records,
        max_upload_bytes=staging.max_upload_bytes,
    )
