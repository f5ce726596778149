from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any

from relacollab.schemas.campaign import CampaignSummary


# Order in which criteria are evaluated; also the key order of MatchResult.breakdown
BREAKDOWN_KEYS = (
    "compensation",
    "contentType",
    "niche",
    "experience",
    "engagement",
    "followers",
    "composition",
    "demographics",
    "availability",
)


def empty_breakdown() -> Dict[str, int]:
    return {key: 0 for key in BREAKDOWN_KEYS}


class MatchResult(BaseModel):
    """Output of the rule-based match scorer.

    `compensation` in the breakdown is a pass flag (1/0), not points; every
    other key holds the points that criterion added to `score`.
    """
    score: int = Field(ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)
    breakdown: Dict[str, int] = Field(default_factory=empty_breakdown)

    @property
    def compensation_compatible(self) -> bool:
        return self.breakdown.get("compensation", 0) > 0


class ScoringWeights(BaseModel):
    """Point budget and cut-offs for each match criterion.

    The maximum points add up to 100. Values mirror the literals the
    marketplace has always used; tune here rather than in the scorer.
    """
    content_type_max: int = Field(default=25, ge=0, le=100)
    content_type_neutral: int = Field(
        default=15,
        ge=0,
        le=100,
        description="Points when the campaign does not ask for specific formats"
    )

    niche_first_match: int = Field(default=10, ge=0, le=100)
    niche_additional_match: int = Field(default=5, ge=0, le=100)
    niche_max: int = Field(default=20, ge=0, le=100)
    niche_context_match: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Points when a creator category only appears in the campaign name/description"
    )

    experience_max: int = Field(default=15, ge=0, le=100)
    experience_brand_bonus: int = Field(default=5, ge=0, le=100)

    # (minimum engagement rate %, points, reason), checked top-down
    engagement_tiers: List[tuple[float, int, str]] = Field(
        default_factory=lambda: [
            (5.0, 10, "Exceptional engagement rate"),
            (3.0, 8, "High engagement rate"),
            (1.5, 5, "Solid engagement rate"),
        ]
    )
    engagement_floor: int = Field(default=3, ge=0, le=100)

    # (minimum followers, points), checked top-down
    follower_tiers: List[tuple[int, int]] = Field(
        default_factory=lambda: [(100_000, 5), (10_000, 4), (5_000, 3), (1_000, 2)]
    )

    composition_perfect: int = Field(default=10, ge=0, le=100)
    composition_partial: int = Field(default=5, ge=0, le=100)

    location_match: int = Field(default=10, ge=0, le=100)
    region_match: int = Field(default=5, ge=0, le=100)

    availability_active: int = Field(default=5, ge=0, le=100)
    availability_pending: int = Field(default=2, ge=0, le=100)


class PredictedMetrics(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    avg_views: int = 0
    avg_likes: int = 0
    avg_comments: int = 0


class AiAnalysis(BaseModel):
    """LLM-written match analysis stored on the match document."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    match_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    match_summary: Optional[str] = None
    predicted_metrics: Optional[PredictedMetrics] = None
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)


# ============================================================
# API payloads
# ============================================================

class ScoreRequest(BaseModel):
    """Ad-hoc scoring of two raw documents.

    Documents are kept as plain dicts so partially-filled or malformed fields
    reach the scorer instead of failing validation. A null or missing
    document scores 0. `match` is an optional cached match document; with
    `useAi` its aiAnalysis.matchPercentage becomes the display score.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    campaign: Optional[Dict[str, Any]] = None
    creator: Optional[Dict[str, Any]] = None
    match: Optional[Dict[str, Any]] = None
    use_ai: bool = False


class ScoreResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    result: MatchResult
    display_score: int
    source: str
    label: str


class CreatorMatch(BaseModel):
    """One creator in a brand's match list or applicant list."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    creator_id: str
    display_name: Optional[str] = None
    followers: int = 0
    display_score: int
    label: str
    source: str = "rule_based"
    match: MatchResult
    application_status: Optional[str] = None


class OpportunityMatch(BaseModel):
    """One campaign in a creator's opportunity list."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    campaign: CampaignSummary
    display_score: int
    label: str
    source: str = "rule_based"
    match: MatchResult


class AnalysisStatusResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    campaign_id: str
    creator_id: str
    ai_status: Optional[str] = None
    queued: bool = False
    ai_analysis: Optional[AiAnalysis] = None
