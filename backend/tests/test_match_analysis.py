"""
Tests for the AI match analysis sidecar.

The OpenAI client is mocked; no network calls are made.
"""
import json
import pytest
from unittest.mock import AsyncMock, MagicMock

from relacollab.core.exceptions import MatchAnalysisError
from relacollab.services.match_analysis_service import (
    MatchAnalysisService,
    build_user_prompt,
    needs_analysis,
    parse_analysis,
    summarize_status,
)
from relacollab.services.match_scoring import calculate_match_score


def make_completion(content):
    """Build an object shaped like an OpenAI chat completion."""
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    completion = MagicMock()
    completion.choices = [choice]
    return completion


def make_client(content=None, side_effect=None) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=make_completion(content),
        side_effect=side_effect,
    )
    return client


VALID_RESPONSE = json.dumps({
    "matchPercentage": 78,
    "matchSummary": "Strong local fit with an engaged audience.",
    "strengths": ["Local audience", "High engagement"],
    "weaknesses": ["Little brand experience"],
    "predictedMetrics": {"avgViews": 12000, "avgLikes": 800, "avgComments": 35},
})


class TestNeedsAnalysis:

    @pytest.mark.parametrize("record,expected", [
        (None, True),
        ({}, True),
        ({"score": 62}, True),
        ({"aiStatus": "error"}, True),
        ({"aiStatus": "pending"}, False),
        ({"aiStatus": "completed"}, False),
        ({"aiStatus": "completed", "aiAnalysis": {"matchPercentage": 70}}, False),
        # Legacy analysis written before matchPercentage existed
        ({"aiStatus": "completed", "aiAnalysis": {"matchSummary": "ok"}}, True),
        ({"aiStatus": "pending", "aiAnalysis": {"matchSummary": "ok"}}, False),
    ])
    def test_trigger_rules(self, record, expected):
        assert needs_analysis(record) is expected


class TestParseAnalysis:

    def test_valid_response(self):
        analysis = parse_analysis(VALID_RESPONSE)

        assert analysis.match_percentage == 78
        assert analysis.strengths == ["Local audience", "High engagement"]
        assert analysis.predicted_metrics.avg_views == 12000

    def test_percentage_clamped(self):
        analysis = parse_analysis(json.dumps({"matchPercentage": 130}))
        assert analysis.match_percentage == 100

    def test_non_numeric_percentage_dropped(self):
        analysis = parse_analysis(json.dumps({"matchPercentage": "high", "matchSummary": "ok"}))
        assert analysis.match_percentage is None
        assert analysis.match_summary == "ok"

    def test_lists_truncated_and_filtered(self):
        analysis = parse_analysis(json.dumps({
            "matchPercentage": 50,
            "strengths": ["a", "b", 3, "c", "d", "e"],
            "weaknesses": None,
        }))
        assert analysis.strengths == ["a", "b", "c", "d"]
        assert analysis.weaknesses == []

    @pytest.mark.parametrize("content", [None, "", "not json", "[1, 2]"])
    def test_unusable_content_raises(self, content):
        with pytest.raises(MatchAnalysisError):
            parse_analysis(content)

    def test_wrong_field_types_raise(self):
        with pytest.raises(MatchAnalysisError) as exc_info:
            parse_analysis(json.dumps({"matchPercentage": 50, "matchSummary": {"text": "x"}}))
        assert exc_info.value.raw_response is not None


class TestBuildUserPrompt:

    def test_includes_documents_and_rule_based_result(self, campaign_factory, creator_factory):
        campaign = campaign_factory.create(name="Rooftop Launch")
        creator = creator_factory.create(displayName="Ana")
        result = calculate_match_score(campaign, creator)

        prompt = build_user_prompt(campaign, creator, result)
        payload = json.loads(prompt.split("\n\n", 1)[1])

        assert payload["campaign"]["name"] == "Rooftop Launch"
        assert payload["creator"]["displayName"] == "Ana"
        assert payload["ruleBasedMatch"]["score"] == result.score
        assert "id" not in payload["creator"]


@pytest.mark.asyncio
class TestAnalyze:

    async def test_success_stores_completed_analysis(self, store, campaign_factory, creator_factory):
        campaign = campaign_factory.create(id="c1")
        creator = creator_factory.create(id="cr1")
        client = make_client(VALID_RESPONSE)
        service = MatchAnalysisService(store, client=client)

        analysis = await service.analyze(campaign, creator, calculate_match_score(campaign, creator))

        assert analysis.match_percentage == 78
        record = store.matches[("c1", "cr1")]
        assert record["aiStatus"] == "completed"
        assert record["aiAnalysis"]["matchPercentage"] == 78
        assert record["aiError"] is None

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"

    async def test_api_failure_marks_error(self, store, campaign_factory, creator_factory):
        campaign = campaign_factory.create(id="c1")
        creator = creator_factory.create(id="cr1")
        client = make_client(side_effect=RuntimeError("timeout"))
        service = MatchAnalysisService(store, client=client)

        analysis = await service.analyze(campaign, creator, calculate_match_score(campaign, creator))

        assert analysis is None
        record = store.matches[("c1", "cr1")]
        assert record["aiStatus"] == "error"
        assert record["aiError"] == "timeout"

    async def test_malformed_output_marks_error(self, store, campaign_factory, creator_factory):
        campaign = campaign_factory.create(id="c1")
        creator = creator_factory.create(id="cr1")
        service = MatchAnalysisService(store, client=make_client("{not json"))

        analysis = await service.analyze(campaign, creator, calculate_match_score(campaign, creator))

        assert analysis is None
        assert store.matches[("c1", "cr1")]["aiStatus"] == "error"

    async def test_rule_based_fields_untouched(self, store, campaign_factory, creator_factory):
        campaign = campaign_factory.create(id="c1")
        creator = creator_factory.create(id="cr1")
        result = calculate_match_score(campaign, creator)
        await store.save_match("c1", "cr1", result)
        service = MatchAnalysisService(store, client=make_client(VALID_RESPONSE))

        await service.analyze(campaign, creator, result)

        record = store.matches[("c1", "cr1")]
        assert record["score"] == result.score
        assert record["reasons"] == result.reasons


class TestSummarizeStatus:

    def test_no_record(self):
        assert summarize_status(None) == {"ai_status": None, "ai_analysis": None}

    def test_completed_record(self):
        status = summarize_status({"aiStatus": "completed", "aiAnalysis": {"matchPercentage": 64}})
        assert status["ai_status"] == "completed"
        assert status["ai_analysis"].match_percentage == 64
