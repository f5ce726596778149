"""
AI match analysis.

Asks GPT-4o for a second opinion on a (campaign, creator) pair and stores it on
the campaign's match document:

    aiStatus:   "pending" -> "completed" | "error"
    aiAnalysis: {matchPercentage, matchSummary, strengths, weaknesses, predictedMetrics}

List views that select the AI score provider use matchPercentage as the
display score; the rule-based score stays in the same document untouched.
"""
import json
import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from relacollab.config import get_settings
from relacollab.core.exceptions import MatchAnalysisError
from relacollab.schemas.match import AiAnalysis, MatchResult
from relacollab.services.document_store import DocumentStore, Document

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a partnerships analyst for an influencer marketplace that connects brands with content creators (mostly Spanish-speaking markets).

You receive a brand campaign, a creator profile and the platform's rule-based match result.
Judge how well the creator fits the campaign and estimate how their content would perform.

## Instructions
- matchPercentage: integer 0-100. Use the rule-based score as a baseline and adjust it
  for content style, audience fit and professionalism. Never exceed 100.
- matchSummary: 2-3 sentences, written for the brand.
- strengths / weaknesses: up to 4 short bullet phrases each.
- predictedMetrics: realistic averages per post given follower count and engagement rate.
- If the creator's data is sparse, stay close to the rule-based score and say so.

## Output Format
Return a JSON object:

{
  "matchPercentage": 72,
  "matchSummary": "...",
  "strengths": ["..."],
  "weaknesses": ["..."],
  "predictedMetrics": {"avgViews": 12000, "avgLikes": 800, "avgComments": 35}
}
"""

CAMPAIGN_FIELDS = ("name", "description", "category", "goal", "location", "ageRange",
                   "vibes", "contentTypes", "compensationType")
CREATOR_FIELDS = ("displayName", "location", "vibes", "categories", "tags", "contentFormats",
                  "whoAppearsInContent", "experienceTime", "hasBrandExperience",
                  "collaborationPreference", "instagramConnected", "tiktokConnected",
                  "instagramMetrics")


def needs_analysis(record: Optional[Mapping]) -> bool:
    """Whether a match document should (re)trigger AI analysis.

    True when there is no document, when there is no analysis and it is not
    completed, or when the stored analysis predates matchPercentage and no run
    is pending.
    """
    if not record:
        return True
    analysis = record.get("aiAnalysis")
    status = record.get("aiStatus")
    if not analysis:
        return status not in ("completed", "pending")
    if isinstance(analysis, Mapping) and analysis.get("matchPercentage") is None:
        return status != "pending"
    return False


def build_user_prompt(campaign: Document, creator: Document, result: MatchResult) -> str:
    """Build the user message for one campaign/creator pair."""
    payload = {
        "campaign": {k: campaign.get(k) for k in CAMPAIGN_FIELDS if campaign.get(k) is not None},
        "creator": {k: creator.get(k) for k in CREATOR_FIELDS if creator.get(k) is not None},
        "ruleBasedMatch": {
            "score": result.score,
            "reasons": result.reasons,
            "breakdown": result.breakdown,
        },
    }
    return f"Analyse this match:\n\n{json.dumps(payload, ensure_ascii=False, indent=2, default=str)}"


def parse_analysis(content: Optional[str]) -> AiAnalysis:
    """Validate the LLM JSON response into an AiAnalysis."""
    if not content:
        raise MatchAnalysisError("Empty response from LLM")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise MatchAnalysisError(f"Failed to parse LLM response as JSON: {e}", content)
    if not isinstance(data, dict):
        raise MatchAnalysisError("LLM response is not a JSON object", content)

    percentage = data.get("matchPercentage")
    if isinstance(percentage, (int, float)) and not isinstance(percentage, bool):
        data["matchPercentage"] = max(0, min(100, round(percentage)))
    else:
        data["matchPercentage"] = None

    data["strengths"] = [s for s in data.get("strengths") or [] if isinstance(s, str)][:4]
    data["weaknesses"] = [w for w in data.get("weaknesses") or [] if isinstance(w, str)][:4]

    try:
        return AiAnalysis.model_validate(data)
    except ValidationError as e:
        raise MatchAnalysisError(f"Invalid analysis payload: {e}", content)


class MatchAnalysisService:
    """Runs and stores LLM match analyses."""

    def __init__(self, store: DocumentStore, client: AsyncOpenAI = None):
        self.store = store
        self.settings = get_settings()
        self.client = client or AsyncOpenAI(
            api_key=self.settings.openai_api_key,
            timeout=self.settings.openai_timeout_seconds,
        )
        self.model = self.settings.openai_model

    async def request_analysis(
        self,
        campaign: Document,
        creator: Document,
        result: MatchResult,
    ) -> AiAnalysis:
        """Call the LLM and return the validated analysis.

        Raises:
            MatchAnalysisError: if the response is empty or malformed
        """
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_user_prompt(campaign, creator, result)},
            ],
            response_format={"type": "json_object"},
            temperature=0.3,
            max_tokens=800,
        )
        return parse_analysis(completion.choices[0].message.content)

    async def analyze(
        self,
        campaign: Document,
        creator: Document,
        result: MatchResult,
    ) -> Optional[AiAnalysis]:
        """
        Run the analysis for a pair and persist the outcome on its match document.

        Failures are recorded as aiStatus="error" and return None; list views
        keep working with the rule-based score.
        """
        campaign_id = campaign["id"]
        creator_id = creator["id"]
        await self.store.mark_ai_status(campaign_id, creator_id, "pending")

        try:
            logger.info(f"🤖 Requesting AI match analysis for {campaign_id}/{creator_id}")
            analysis = await self.request_analysis(campaign, creator, result)
        except MatchAnalysisError as e:
            logger.error(f"AI analysis for {campaign_id}/{creator_id} returned unusable output: {e.message}")
            await self.store.mark_ai_status(campaign_id, creator_id, "error", e.message)
            return None
        except Exception as e:
            logger.error(f"AI analysis for {campaign_id}/{creator_id} failed: {e}")
            await self.store.mark_ai_status(campaign_id, creator_id, "error", str(e))
            return None

        await self.store.save_ai_analysis(campaign_id, creator_id, analysis)
        logger.info(
            f"   ✓ AI match {campaign_id}/{creator_id}: {analysis.match_percentage}% "
            f"(rule-based {result.score}%)"
        )
        return analysis


def summarize_status(record: Optional[Mapping]) -> Dict[str, Any]:
    """Status fields of a match document for API responses."""
    if not record:
        return {"ai_status": None, "ai_analysis": None}
    analysis = record.get("aiAnalysis")
    return {
        "ai_status": record.get("aiStatus"),
        "ai_analysis": AiAnalysis.model_validate(analysis) if isinstance(analysis, Mapping) else None,
    }
