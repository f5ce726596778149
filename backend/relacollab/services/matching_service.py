from collections.abc import Mapping
from typing import Any, Dict, List, Optional
import logging

from relacollab.config import get_settings, Settings
from relacollab.core.exceptions import DocumentStoreError, NotFoundError
from relacollab.schemas.campaign import CampaignSummary
from relacollab.schemas.match import CreatorMatch, OpportunityMatch, MatchResult
from relacollab.services.document_store import DocumentStore, Document
from relacollab.services.match_scoring import to_number
from relacollab.services.score_providers import ScoreProvider, ScoredMatch, RuleBasedScorer

logger = logging.getLogger(__name__)


def get_score_label(score: int) -> str:
    """Label shown next to a match percentage."""
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Fair"
    return "Low"


def get_follower_count(creator: Mapping) -> int:
    metrics = creator.get("instagramMetrics")
    if not isinstance(metrics, Mapping):
        return 0
    return int(to_number(metrics.get("followers")) or 0)


def sort_creator_matches(matches: List[CreatorMatch]) -> List[CreatorMatch]:
    """Highest display score first; ties go to the bigger audience, then creator id."""
    return sorted(matches, key=lambda m: (-m.display_score, -m.followers, m.creator_id))


def sort_opportunities(matches: List[OpportunityMatch]) -> List[OpportunityMatch]:
    return sorted(matches, key=lambda m: (-m.display_score, m.campaign.id))


def _needs_write(record: Optional[Mapping], result: MatchResult) -> bool:
    """False when the cached record already holds exactly this result."""
    return not (
        record
        and record.get("score") == result.score
        and list(record.get("reasons") or []) == result.reasons
        and dict(record.get("breakdown") or {}) == result.breakdown
    )


class MatchingService:
    """Builds the brand match list, the creator opportunity list and applicant views."""

    def __init__(
        self,
        store: DocumentStore,
        provider: ScoreProvider = None,
        settings: Settings = None,
    ):
        self.store = store
        self.provider = provider or RuleBasedScorer()
        self.settings = settings or get_settings()

    def score_pair(self, campaign: Any, creator: Any, match_record: Optional[Mapping] = None) -> ScoredMatch:
        """Score two ad-hoc documents with the configured provider."""
        return self.provider.score(campaign, creator, match_record)

    async def get_brand_matches(
        self,
        campaign_id: str,
        min_score: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[CreatorMatch]:
        """
        Rank every creator for a campaign.

        Args:
            campaign_id: Campaign to match against
            min_score: Minimum display score (defaults to BRAND_MATCH_MIN_SCORE, 40)
            limit: Maximum results after sorting

        Raises:
            NotFoundError: if the campaign does not exist
        """
        campaign = await self._require_campaign(campaign_id)
        threshold = self.settings.brand_match_min_score if min_score is None else min_score

        creators = await self.store.list_creators()
        cached = await self.store.get_matches_by_creator(campaign_id)

        matches = []
        for creator in creators:
            creator_id = creator["id"]
            scored = self.provider.score(campaign, creator, cached.get(creator_id))
            await self._cache_result(campaign_id, creator_id, scored.result, cached.get(creator_id))
            if scored.display_score < threshold:
                continue
            matches.append(self._to_creator_match(creator, scored))

        matches = sort_creator_matches(matches)
        logger.info(
            f"🎯 Campaign {campaign_id}: {len(matches)}/{len(creators)} creators "
            f"scored >= {threshold} ({self.provider.name})"
        )
        return matches[:limit] if limit else matches

    async def get_opportunities(
        self,
        creator_id: str,
        min_score: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[OpportunityMatch]:
        """
        Active campaigns a creator should see.

        Args:
            creator_id: Creator viewing their opportunities
            min_score: Minimum display score (defaults to OPPORTUNITY_MIN_SCORE, 50)
            limit: Maximum results after sorting

        Raises:
            NotFoundError: if the creator does not exist
        """
        creator = await self.store.get_creator(creator_id)
        if creator is None:
            raise NotFoundError("creator", creator_id)
        threshold = self.settings.opportunity_min_score if min_score is None else min_score

        campaigns = await self.store.list_campaigns(status="active")

        opportunities = []
        for campaign in campaigns:
            campaign_id = campaign["id"]
            record = await self.store.get_match(campaign_id, creator_id)
            scored = self.provider.score(campaign, creator, record)
            await self._cache_result(campaign_id, creator_id, scored.result, record)
            if scored.display_score < threshold:
                continue
            opportunities.append(
                OpportunityMatch(
                    campaign=CampaignSummary.model_validate(_summary_fields(campaign)),
                    display_score=scored.display_score,
                    label=get_score_label(scored.display_score),
                    source=scored.source,
                    match=scored.result,
                )
            )

        opportunities = sort_opportunities(opportunities)
        logger.info(
            f"📋 Creator {creator_id}: {len(opportunities)}/{len(campaigns)} active campaigns "
            f"scored >= {threshold} ({self.provider.name})"
        )
        return opportunities[:limit] if limit else opportunities

    async def get_applicants(self, campaign_id: str) -> List[CreatorMatch]:
        """Every applicant of a campaign with its match score; no threshold applied."""
        campaign = await self._require_campaign(campaign_id)
        applications = await self.store.list_applications(campaign_id)
        cached = await self.store.get_matches_by_creator(campaign_id)

        applicants = []
        for application in applications:
            creator_id = application.get("creatorId")
            creator = await self.store.get_creator(creator_id) if creator_id else None
            if creator is None:
                logger.warning(f"   ⚠ Application {application.get('id')} references missing creator {creator_id}")
                continue

            scored = self.provider.score(campaign, creator, cached.get(creator_id))
            await self._cache_result(campaign_id, creator_id, scored.result, cached.get(creator_id))
            applicants.append(
                self._to_creator_match(creator, scored, application_status=application.get("status"))
            )

        return sort_creator_matches(applicants)

    async def rescore_campaigns(self, campaign_ids: Optional[List[str]] = None) -> Dict[str, int]:
        """
        Recompute and cache rule-based matches for every creator.

        Args:
            campaign_ids: Campaigns to rescore (defaults to every active campaign)

        Returns:
            Number of creators scored per campaign id
        """
        if campaign_ids:
            campaigns = [await self._require_campaign(cid) for cid in campaign_ids]
        else:
            campaigns = await self.store.list_campaigns(status="active")
        creators = await self.store.list_creators()

        scored_counts = {}
        for campaign in campaigns:
            campaign_id = campaign["id"]
            cached = await self.store.get_matches_by_creator(campaign_id)
            for creator in creators:
                result = self.provider.score(campaign, creator, cached.get(creator["id"])).result
                if _needs_write(cached.get(creator["id"]), result):
                    await self.store.save_match(campaign_id, creator["id"], result)
            scored_counts[campaign_id] = len(creators)
            logger.info(f"   ✓ Rescored campaign {campaign_id}: {len(creators)} creators")

        return scored_counts

    async def _require_campaign(self, campaign_id: str) -> Document:
        campaign = await self.store.get_campaign(campaign_id)
        if campaign is None:
            raise NotFoundError("campaign", campaign_id)
        return campaign

    async def _cache_result(
        self,
        campaign_id: str,
        creator_id: str,
        result: MatchResult,
        record: Optional[Mapping],
    ) -> None:
        """
        Write the rule-based result unless the cached copy is already identical.

        The cache is best-effort for read views: a failed write is logged and
        the freshly computed result is still returned to the caller.
        """
        if not _needs_write(record, result):
            return
        try:
            await self.store.save_match(campaign_id, creator_id, result)
        except DocumentStoreError as e:
            logger.warning(f"   ⚠ Could not cache match {campaign_id}/{creator_id}: {e.message}")

    def _to_creator_match(
        self,
        creator: Document,
        scored: ScoredMatch,
        application_status: Optional[str] = None,
    ) -> CreatorMatch:
        return CreatorMatch(
            creator_id=creator["id"],
            display_name=creator.get("displayName") if isinstance(creator.get("displayName"), str) else None,
            followers=get_follower_count(creator),
            display_score=scored.display_score,
            label=get_score_label(scored.display_score),
            source=scored.source,
            match=scored.result,
            application_status=application_status,
        )


def _summary_fields(campaign: Document) -> Dict[str, Any]:
    """Pick the summary fields, dropping values of the wrong type."""
    summary = {"id": campaign["id"]}
    for key in ("brandId", "name", "location", "compensationType", "goal", "status"):
        value = campaign.get(key)
        if isinstance(value, str):
            summary[key] = value
    return summary
