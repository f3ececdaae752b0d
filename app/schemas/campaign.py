"""
app/schemas/campaign.py

Payload and response schemas for campaigns.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CampaignUpdate(BaseModel):
    """
    Owner-editable campaign fields. Unset fields are left unchanged.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: str | None = None
    dataset: list[dict[str, str]] | None = None


class CampaignSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    status: str
    total_records: int = Field(..., ge=0)
    created_at: datetime

