# Pydantic schemas
from relacollab.schemas.campaign import Campaign, CampaignSummary, CompensationType, AgeRange
from relacollab.schemas.creator import CreatorProfile, InstagramMetrics, CollaborationPreference
from relacollab.schemas.match import (
    MatchResult,
    ScoringWeights,
    AiAnalysis,
    CreatorMatch,
    OpportunityMatch,
)

__all__ = [
    "Campaign",
    "CampaignSummary",
    "CompensationType",
    "AgeRange",
    "CreatorProfile",
    "InstagramMetrics",
    "CollaborationPreference",
    "MatchResult",
    "ScoringWeights",
    "AiAnalysis",
    "CreatorMatch",
    "OpportunityMatch",
]
