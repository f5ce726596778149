# Database models
from relacollab.models.campaign import Campaign, CampaignApplication
from relacollab.models.creator import Creator
from relacollab.models.match import CampaignMatch

__all__ = [
    "Campaign",
    "CampaignApplication",
    "Creator",
    "CampaignMatch",
]
