"""
Creator–campaign match scoring.

Weighted additive model over a fixed list of criteria:

    compensation   hard gate (score forced to 0 when incompatible)
    contentType    max 25
    niche          max 20
    experience     max 15
    engagement     max 10
    followers      max 5
    composition    max 10
    demographics   max 10
    availability   max 5

Inputs are campaign / creator documents that may be partially populated or
hold malformed values. Anything missing or unreadable counts as "criterion not
met"; the scorer never raises.
"""
import math
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel

from relacollab.schemas.match import MatchResult, ScoringWeights, empty_breakdown


# Locations that place no geographic restriction (campaign or creator side)
WILDCARD_LOCATIONS = {"global", "any", "anywhere"}

# Formats each connected platform can deliver, used when the creator has not
# declared formats explicitly
PLATFORM_FORMATS = {
    "instagramConnected": {"post", "stories", "carousel", "reels", "video"},
    "tiktokConnected": {"video"},
}

# (campaign vibe, onboarding composition answer, reason)
COMPOSITION_FITS = (
    ("romantic", "mi pareja", "Perfect fit for romantic campaign"),
    ("family", "mi familia", "Perfect fit for family campaign"),
    ("party", "mis amigos", "Perfect fit for social campaign"),
)

# (substring of experienceTime, points, reason), checked top-down
EXPERIENCE_LEVELS = (
    ("3+", 10, "Highly experienced creator"),
    ("1-2", 7, "Experienced creator"),
    ("6-12", 5, "Growing creator experience"),
    ("menos", 3, "New creator"),
)

MONETARY_PREFERENCES = {"con remuneración", "ambos"}
EXCHANGE_PREFERENCES = {"intercambios", "ambos"}

CriterionScore = Tuple[int, Optional[str]]


# ============================================================
# Tolerant field readers
# ============================================================

def _as_document(value: Any) -> Dict[str, Any]:
    """Return a plain dict for a mapping or pydantic model, {} for anything else."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""


def _text_list(value: Any) -> List[str]:
    """Stripped, non-empty strings of a list; order kept, duplicates dropped (case-insensitive)."""
    if not isinstance(value, (list, tuple)):
        return []
    seen = set()
    items = []
    for item in value:
        text = _text(item)
        if text and text.lower() not in seen:
            seen.add(text.lower())
            items.append(text)
    return items


def to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace("%", ""))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _first_list(doc: Dict[str, Any], *keys: str) -> List[str]:
    for key in keys:
        items = _text_list(doc.get(key))
        if items:
            return items
    return []


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _overlaps(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return a in b or b in a


class MatchScorer:
    """Scores one campaign against one creator profile."""

    def __init__(self, weights: ScoringWeights = None):
        self.weights = weights or ScoringWeights()

    def score(self, campaign: Any, creator: Any) -> MatchResult:
        """
        Compute the match between a campaign and a creator.

        Args:
            campaign: Campaign document (dict, pydantic model or None)
            creator: Creator profile document (dict, pydantic model or None)

        Returns:
            MatchResult with a 0-100 score, reasons in evaluation order and
            per-criterion points.
        """
        campaign_doc = _as_document(campaign)
        creator_doc = _as_document(creator)
        breakdown = empty_breakdown()

        if not campaign_doc or not creator_doc:
            return MatchResult(score=0, reasons=[], breakdown=breakdown)

        # Compensation is eliminatory
        if not self._compensation_compatible(campaign_doc, creator_doc):
            return MatchResult(
                score=0,
                reasons=["Compensation type incompatible"],
                breakdown=breakdown,
            )
        breakdown["compensation"] = 1
        reasons = ["✓ Compensation compatible"]

        criteria = (
            ("contentType", self._score_content_type),
            ("niche", self._score_niche),
            ("experience", self._score_experience),
            ("engagement", self._score_engagement),
            ("followers", self._score_followers),
            ("composition", self._score_composition),
            ("demographics", self._score_demographics),
            ("availability", self._score_availability),
        )

        total = 0
        for key, criterion in criteria:
            points, reason = criterion(campaign_doc, creator_doc)
            breakdown[key] = points
            total += points
            if points > 0 and reason:
                reasons.append(reason)

        score = max(0, min(100, total))
        return MatchResult(score=score, reasons=reasons, breakdown=breakdown)

    # ============================================================
    # Criteria
    # ============================================================

    def _compensation_compatible(self, campaign: Dict[str, Any], creator: Dict[str, Any]) -> bool:
        """Brand payment terms must be acceptable to the creator.

        A campaign without a compensation type accepts everyone.
        """
        campaign_comp = _text(campaign.get("compensationType")).lower()
        creator_pref = _text(creator.get("collaborationPreference")).lower()

        if campaign_comp == "exchange":
            return creator_pref in EXCHANGE_PREFERENCES
        if campaign_comp == "monetary":
            return creator_pref in MONETARY_PREFERENCES
        return True

    def _creator_formats(self, creator: Dict[str, Any]) -> set:
        declared = _first_list(creator, "contentFormats", "contentTypes")
        if declared:
            return {fmt.lower() for fmt in declared}

        formats = set()
        for flag, platform_formats in PLATFORM_FORMATS.items():
            if creator.get(flag) is True:
                formats |= platform_formats
        return formats

    def _score_content_type(self, campaign: Dict[str, Any], creator: Dict[str, Any]) -> CriterionScore:
        required = [t.lower() for t in _text_list(campaign.get("contentTypes"))]
        if not required:
            return self.weights.content_type_neutral, "No specific content format required"

        available = self._creator_formats(creator)
        matched = [t for t in required if t in available]
        if not matched:
            return 0, None

        ratio = len(matched) / len(required)
        points = _round_half_up(ratio * self.weights.content_type_max)
        if len(matched) == len(required):
            return points, "✓ Creates all required content types"
        return points, f"✓ Matches {len(matched)}/{len(required)} content types"

    def _score_niche(self, campaign: Dict[str, Any], creator: Dict[str, Any]) -> CriterionScore:
        creator_tags = _first_list(creator, "vibes", "categories", "tags")
        campaign_vibes = _text_list(campaign.get("vibes"))
        if not creator_tags:
            return 0, None

        matched = [
            vibe for vibe in campaign_vibes
            if any(_overlaps(vibe, tag) for tag in creator_tags)
        ]
        if matched:
            w = self.weights
            points = min(w.niche_max, w.niche_first_match + (len(matched) - 1) * w.niche_additional_match)
            return points, f"✓ Matches vibes: {', '.join(matched[:2])}"

        # Soft match: creator niche mentioned in the campaign copy
        context = f"{_text(campaign.get('name'))} {_text(campaign.get('description'))}".lower()
        if context.strip() and any(tag.lower() in context for tag in creator_tags):
            return self.weights.niche_context_match, "Content relevant to campaign"
        return 0, None

    def _score_experience(self, campaign: Dict[str, Any], creator: Dict[str, Any]) -> CriterionScore:
        experience_time = _text(creator.get("experienceTime")).lower()
        points, reason = 0, None
        for marker, level_points, level_reason in EXPERIENCE_LEVELS:
            if marker in experience_time:
                points, reason = level_points, level_reason
                break

        if creator.get("hasBrandExperience") is True:
            points = min(self.weights.experience_max, points + self.weights.experience_brand_bonus)
            reason = f"{reason}, has brand collaboration experience" if reason else "Has brand collaboration experience"

        return min(self.weights.experience_max, points), reason

    def _instagram_metrics(self, creator: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Metrics only count while the account is connected."""
        if creator.get("instagramConnected") is not True:
            return None
        metrics = creator.get("instagramMetrics")
        if not isinstance(metrics, Mapping):
            return None
        return dict(metrics)

    def _score_engagement(self, campaign: Dict[str, Any], creator: Dict[str, Any]) -> CriterionScore:
        metrics = self._instagram_metrics(creator)
        if metrics is None:
            return 0, None

        rate = to_number(metrics.get("engagementRate")) or 0.0
        for min_rate, points, reason in self.weights.engagement_tiers:
            if rate >= min_rate:
                return points, reason
        return self.weights.engagement_floor, "Instagram account connected"

    def _score_followers(self, campaign: Dict[str, Any], creator: Dict[str, Any]) -> CriterionScore:
        metrics = self._instagram_metrics(creator)
        if metrics is None:
            return 0, None

        followers = to_number(metrics.get("followers")) or 0.0
        for min_followers, points in self.weights.follower_tiers:
            if followers >= min_followers:
                return points, f"Audience of {int(followers):,} followers"
        return 0, None

    def _score_composition(self, campaign: Dict[str, Any], creator: Dict[str, Any]) -> CriterionScore:
        who_appears = {who.lower() for who in _text_list(creator.get("whoAppearsInContent"))}
        if not who_appears:
            return 0, None

        campaign_vibes = {vibe.lower() for vibe in _text_list(campaign.get("vibes"))}
        for vibe, composition, reason in COMPOSITION_FITS:
            if vibe in campaign_vibes and composition in who_appears:
                return self.weights.composition_perfect, reason

        if "solo yo" in who_appears:
            return self.weights.composition_partial, "Solo content suits most campaigns"
        return self.weights.composition_partial, "Flexible content composition"

    def _score_demographics(self, campaign: Dict[str, Any], creator: Dict[str, Any]) -> CriterionScore:
        campaign_loc = _text(campaign.get("location")).lower()
        if not campaign_loc or campaign_loc in WILDCARD_LOCATIONS:
            return self.weights.location_match, "No location restriction"

        creator_loc = _text(creator.get("location")).lower()
        if not creator_loc or creator_loc in WILDCARD_LOCATIONS:
            return self.weights.location_match, "Available in any location"
        if campaign_loc in creator_loc or creator_loc in campaign_loc:
            return self.weights.location_match, "Perfect location match"

        if creator_loc.split(",")[0].strip() == campaign_loc.split(",")[0].strip():
            return self.weights.region_match, "Same region"
        return 0, None

    def _score_availability(self, campaign: Dict[str, Any], creator: Dict[str, Any]) -> CriterionScore:
        status = _text(creator.get("status")).lower()
        if status == "active":
            return self.weights.availability_active, "Active creator"
        if status == "pending":
            return self.weights.availability_pending, "Profile pending approval"
        return 0, None


_default_scorer = MatchScorer()


def calculate_match_score(campaign: Any, creator: Any, weights: ScoringWeights = None) -> MatchResult:
    """Score a campaign against a creator profile (0-100). Never raises."""
    scorer = MatchScorer(weights) if weights is not None else _default_scorer
    return scorer.score(campaign, creator)
