"""
app/services/campaign_normalizer.py

Derived-field rules for campaigns, called explicitly at every write site.
"""

from __future__ import annotations

from db.models.campaign import Campaign


def normalize_campaign(campaign: Campaign) -> Campaign:
    """
    Keep ``total_records`` equal to ``len(dataset)``.
    """

    if campaign.dataset is None:
        campaign.dataset = []
    campaign.total_records = len(campaign.dataset)
    return campaign
