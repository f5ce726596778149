"""
Score providers decide which number a list view filters and displays.

The rule-based scorer always runs. The AI provider only swaps the
*display* score for the LLM's matchPercentage when the cached match document
has one; the rule-based MatchResult is passed through untouched.
"""
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from relacollab.schemas.match import MatchResult, ScoringWeights
from relacollab.services.match_scoring import MatchScorer, to_number


SOURCE_RULE_BASED = "rule_based"
SOURCE_AI = "ai"


@dataclass(frozen=True)
class ScoredMatch:
    """A rule-based result plus the score a caller should show and filter on."""
    result: MatchResult
    display_score: int
    source: str = SOURCE_RULE_BASED


class ScoreProvider(ABC):
    """Strategy for scoring a (campaign, creator) pair."""

    name: str = ""

    @abstractmethod
    def score(self, campaign: Any, creator: Any, match_record: Optional[Mapping] = None) -> ScoredMatch:
        """Score a pair, optionally consulting its cached match document."""


class RuleBasedScorer(ScoreProvider):
    name = SOURCE_RULE_BASED

    def __init__(self, weights: ScoringWeights = None):
        self.scorer = MatchScorer(weights)

    def score(self, campaign: Any, creator: Any, match_record: Optional[Mapping] = None) -> ScoredMatch:
        result = self.scorer.score(campaign, creator)
        return ScoredMatch(result=result, display_score=result.score, source=SOURCE_RULE_BASED)


class AiScorer(ScoreProvider):
    """Prefers the AI matchPercentage stored on the match document, when present."""

    name = SOURCE_AI

    def __init__(self, fallback: RuleBasedScorer = None):
        self.fallback = fallback or RuleBasedScorer()

    def score(self, campaign: Any, creator: Any, match_record: Optional[Mapping] = None) -> ScoredMatch:
        scored = self.fallback.score(campaign, creator)
        override = self.get_ai_percentage(match_record)
        if override is None:
            return scored
        return ScoredMatch(result=scored.result, display_score=override, source=SOURCE_AI)

    @staticmethod
    def get_ai_percentage(match_record: Optional[Mapping]) -> Optional[int]:
        """Extract aiAnalysis.matchPercentage clamped to 0-100, or None."""
        if not isinstance(match_record, Mapping):
            return None
        analysis = match_record.get("aiAnalysis")
        if not isinstance(analysis, Mapping):
            return None
        percentage = to_number(analysis.get("matchPercentage"))
        if percentage is None:
            return None
        return max(0, min(100, int(round(percentage))))


def get_score_provider(use_ai: bool = False, weights: ScoringWeights = None) -> ScoreProvider:
    """Select the provider for a list view."""
    rule_based = RuleBasedScorer(weights)
    if use_ai:
        return AiScorer(fallback=rule_based)
    return rule_based
