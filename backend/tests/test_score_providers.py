"""
Unit tests for score providers (rule-based vs AI display score).
"""
import pytest

from relacollab.schemas.match import ScoringWeights
from relacollab.services.score_providers import (
    AiScorer,
    RuleBasedScorer,
    SOURCE_AI,
    SOURCE_RULE_BASED,
    get_score_provider,
)


class TestRuleBasedScorer:

    def test_display_score_is_rule_based_score(self, campaign_factory, creator_factory):
        scored = RuleBasedScorer().score(campaign_factory.create(), creator_factory.create())

        assert scored.display_score == scored.result.score
        assert scored.source == SOURCE_RULE_BASED

    def test_ignores_match_record(self, campaign_factory, creator_factory):
        record = {"aiAnalysis": {"matchPercentage": 99}}
        scored = RuleBasedScorer().score(campaign_factory.create(), creator_factory.create(), record)

        assert scored.display_score == 62

    def test_custom_weights(self, campaign_factory, creator_factory):
        scored = RuleBasedScorer(ScoringWeights(availability_active=0)).score(
            campaign_factory.create(), creator_factory.create()
        )
        assert scored.display_score == 57


class TestAiScorer:

    def test_uses_ai_percentage_when_present(self, campaign_factory, creator_factory):
        record = {"aiAnalysis": {"matchPercentage": 88}, "aiStatus": "completed"}
        scored = AiScorer().score(campaign_factory.create(), creator_factory.create(), record)

        assert scored.display_score == 88
        assert scored.source == SOURCE_AI
        # Rule-based result travels alongside the override
        assert scored.result.score == 62

    def test_falls_back_without_record(self, campaign_factory, creator_factory):
        scored = AiScorer().score(campaign_factory.create(), creator_factory.create(), None)

        assert scored.display_score == 62
        assert scored.source == SOURCE_RULE_BASED

    def test_falls_back_when_analysis_pending(self, campaign_factory, creator_factory):
        record = {"aiStatus": "pending", "aiAnalysis": None}
        scored = AiScorer().score(campaign_factory.create(), creator_factory.create(), record)

        assert scored.source == SOURCE_RULE_BASED

    def test_ai_override_can_rescue_gated_pair(self, campaign_factory, creator_factory):
        creator = creator_factory.create(collaborationPreference="Intercambios")
        record = {"aiAnalysis": {"matchPercentage": 45}}

        scored = AiScorer().score(campaign_factory.create(), creator, record)

        assert scored.result.score == 0
        assert scored.display_score == 45

    @pytest.mark.parametrize("record,expected", [
        ({"aiAnalysis": {"matchPercentage": 72}}, 72),
        ({"aiAnalysis": {"matchPercentage": 72.6}}, 73),
        ({"aiAnalysis": {"matchPercentage": "64"}}, 64),
        ({"aiAnalysis": {"matchPercentage": 140}}, 100),
        ({"aiAnalysis": {"matchPercentage": -5}}, 0),
        ({"aiAnalysis": {"matchPercentage": None}}, None),
        ({"aiAnalysis": {"matchSummary": "legacy"}}, None),
        ({"aiAnalysis": "broken"}, None),
        ({}, None),
        (None, None),
    ])
    def test_get_ai_percentage(self, record, expected):
        assert AiScorer.get_ai_percentage(record) == expected


class TestGetScoreProvider:

    def test_default_is_rule_based(self):
        assert isinstance(get_score_provider(), RuleBasedScorer)

    def test_use_ai(self):
        provider = get_score_provider(use_ai=True)
        assert isinstance(provider, AiScorer)
        assert provider.name == SOURCE_AI
