# Business logic services
from relacollab.services.match_scoring import MatchScorer, calculate_match_score
from relacollab.services.score_providers import (
    ScoreProvider,
    ScoredMatch,
    RuleBasedScorer,
    AiScorer,
    get_score_provider,
)
from relacollab.services.document_store import DocumentStore, SqlDocumentStore
from relacollab.services.matching_service import MatchingService, get_score_label
from relacollab.services.match_analysis_service import MatchAnalysisService, needs_analysis

__all__ = [
    "MatchScorer",
    "calculate_match_score",
    "ScoreProvider",
    "ScoredMatch",
    "RuleBasedScorer",
    "AiScorer",
    "get_score_provider",
    "DocumentStore",
    "SqlDocumentStore",
    "MatchingService",
    "get_score_label",
    "MatchAnalysisService",
    "needs_analysis",
]
