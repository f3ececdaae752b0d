"""
db/models/campaign.py

Campaign model: one uploaded tabular file embedded as a single owned dataset.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import CheckConstraint, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, JSONDocument, TimestampMixin


class CampaignStatus:
    """
    Closed set of campaign states.

    The owner drives the ingestion states; an administrative reviewer
    drives approved/rejected.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    APPROVED = "approved"
    REJECTED = "rejected"


OWNER_CAMPAIGN_STATUSES = frozenset(
    {
        CampaignStatus.PENDING,
        CampaignStatus.PROCESSING,
        CampaignStatus.COMPLETED,
        CampaignStatus.FAILED,
    }
)
REVIEW_CAMPAIGN_STATUSES = frozenset({CampaignStatus.APPROVED, CampaignStatus.REJECTED})
CAMPAIGN_STATUSES = OWNER_CAMPAIGN_STATUSES | REVIEW_CAMPAIGN_STATUSES


class Campaign(Base, TimestampMixin):
    """
    Bulk-imported aggregate.

    ``dataset`` is owned inline and is never addressable on its own.
    ``total_records`` mirrors ``len(dataset)``; see
    ``app.services.campaign_normalizer.normalize_campaign``.
    """

    __tablename__ = "campaigns"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=CampaignStatus.PENDING,
        comment="pending, processing, completed, failed, approved, rejected",
    )
    dataset: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONDocument,
        nullable=False,
        default=list,
    )
    file_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    file_path: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
        comment="Staged upload path, relative to the upload storage root",
    )
    total_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processed_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'processing', 'completed', 'failed', 'approved', 'rejected')",
            name="ck_campaigns_status",
        ),
        Index("ix_campaigns_owner_id", "owner_id"),
        Index("ix_campaigns_status", "status"),
        Index("ix_campaigns_owner_created_at", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Campaign id={self.id} name={self.name!r} "
            f"owner_id={self.owner_id} status={self.status!r}>"
        )
