"""Unit tests for the Claude enrichment client.

The Anthropic SDK client is replaced by a MagicMock whose
``messages.create`` is an AsyncMock, so no network traffic happens.
"""

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from revops_maturity.adapters.ai_client import (
    ACTION_PLAN_KEYS,
    ANALYSIS_KEYS,
    ClaudeEnrichmentClient,
    build_action_plan_prompt,
    build_analysis_prompt,
    build_context,
    parse_json_reply,
)
from revops_maturity.core.models import Assessment
from revops_maturity.errors import MalformedResponseError, UnconfiguredError, UpstreamError

_ANALYSIS = {
    "narrative": "Solid foundations, weak data practices.",
    "strengths": [{"dimension": "Strategy & Leadership", "insight": "Clear ownership"}],
    "gaps": [{"dimension": "Data & Analytics", "risk": "Blind forecasting", "impact": "Missed targets"}],
    "recommendations": [{"priority": 1, "action": "Define a single pipeline", "rationale": "Alignment"}],
}

_ACTION_PLAN = {
    "summary": "Fix the data layer first.",
    "weakestDimensions": ["data", "tech", "journey"],
    "phases": [{"name": "Phase 1: Foundation (Weeks 1-4)", "focus": "Data hygiene", "steps": []}],
    "expectedOutcome": "Trusted pipeline reporting.",
}


def _assessment() -> Assessment:
    return Assessment(
        id="7d7c2a0e-0000-4000-8000-000000000001",
        lead_company="Acme Oy",
        lead_role="CRO",
        answers={},
        score_strategy=4.0,
        score_process=3.0,
        score_data=1.7,
        score_tech=2.0,
        score_people=3.3,
        score_journey=2.3,
        score_overall=2.7,
        maturity_level="Defined",
    )


def _reply(text: str) -> SimpleNamespace:
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)], stop_reason="end_turn")


def _client(create: AsyncMock) -> ClaudeEnrichmentClient:
    sdk = MagicMock()
    sdk.messages.create = create
    return ClaudeEnrichmentClient(api_key="", model="claude-test", max_tokens=123, client=sdk)


# ---------------------------------------------------------------------------
# Prompt building
# ---------------------------------------------------------------------------


class TestPrompts:
    """Prompt context and templates."""

    def test_context_orders_weakest_and_strongest(self) -> None:
        """Weakest are ascending, strongest descending."""
        context = build_context(_assessment())
        assert context.weakest == [("data", 1.7), ("tech", 2.0), ("journey", 2.3)]
        assert context.strongest == [("strategy", 4.0), ("people", 3.3)]

    def test_context_mentions_company_and_level(self) -> None:
        """The summary carries organisation, score and level."""
        text = build_context(_assessment()).context
        assert "Acme Oy" in text
        assert "2.7/5.0 (Defined)" in text

    def test_missing_company_is_unknown(self) -> None:
        """A lead without company or role is described as Unknown."""
        assessment = _assessment()
        assessment.lead_company = None
        assessment.lead_role = None
        assert "Organisation: Unknown" in build_context(assessment).context

    def test_prompts_ask_for_required_keys(self) -> None:
        """Both prompts spell out every key the parser will require."""
        context = build_context(_assessment())
        analysis_prompt = build_analysis_prompt(context)
        plan_prompt = build_action_plan_prompt(context)
        assert all(f'"{key}"' in analysis_prompt for key in ANALYSIS_KEYS)
        assert all(f'"{key}"' in plan_prompt for key in ACTION_PLAN_KEYS)


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------


class TestParseJsonReply:
    """JSON extraction from model replies."""

    def test_plain_json(self) -> None:
        """A bare JSON object parses."""
        assert parse_json_reply(json.dumps(_ANALYSIS), ANALYSIS_KEYS) == _ANALYSIS

    @pytest.mark.parametrize("fence", ["```json\n{}\n```", "```\n{}\n```"])
    def test_code_fences_are_stripped(self, fence: str) -> None:
        """Markdown fences with or without a language tag are tolerated."""
        text = fence.replace("{}", json.dumps(_ACTION_PLAN))
        assert parse_json_reply(text, ACTION_PLAN_KEYS) == _ACTION_PLAN

    def test_invalid_json(self) -> None:
        """Prose instead of JSON is malformed."""
        with pytest.raises(MalformedResponseError):
            parse_json_reply("Here is your analysis: it is fine.", ANALYSIS_KEYS)

    def test_non_object_json(self) -> None:
        """A JSON array is malformed."""
        with pytest.raises(MalformedResponseError):
            parse_json_reply("[1, 2, 3]", ANALYSIS_KEYS)

    def test_missing_key(self) -> None:
        """An object without a required key is malformed."""
        partial = {key: value for key, value in _ANALYSIS.items() if key != "gaps"}
        with pytest.raises(MalformedResponseError, match="gaps"):
            parse_json_reply(json.dumps(partial), ANALYSIS_KEYS)


# ---------------------------------------------------------------------------
# ClaudeEnrichmentClient
# ---------------------------------------------------------------------------


class TestClaudeEnrichmentClient:
    """Remote calls through a mocked SDK."""

    def test_unconfigured_without_key_or_client(self) -> None:
        """No API key means the client is unconfigured."""
        assert ClaudeEnrichmentClient(api_key="", model="m").is_configured is False

    def test_configured_with_key(self) -> None:
        """An API key builds a real SDK client without any network call."""
        assert ClaudeEnrichmentClient(api_key="sk-test", model="m").is_configured is True

    @pytest.mark.asyncio()
    async def test_unconfigured_raises(self) -> None:
        """Both operations raise UnconfiguredError without a credential."""
        client = ClaudeEnrichmentClient(api_key="", model="m")
        with pytest.raises(UnconfiguredError):
            await client.generate_analysis(_assessment())
        with pytest.raises(UnconfiguredError):
            await client.generate_action_plan(_assessment())

    @pytest.mark.asyncio()
    async def test_generate_analysis(self) -> None:
        """A valid reply is parsed and the request uses the configured model."""
        create = AsyncMock(return_value=_reply(json.dumps(_ANALYSIS)))
        result = await _client(create).generate_analysis(_assessment())

        assert result == _ANALYSIS
        kwargs: dict[str, Any] = create.await_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 123
        assert kwargs["messages"][0]["role"] == "user"

    @pytest.mark.asyncio()
    async def test_generate_action_plan_with_fences(self) -> None:
        """Fenced replies are accepted."""
        create = AsyncMock(return_value=_reply(f"```json\n{json.dumps(_ACTION_PLAN)}\n```"))
        assert await _client(create).generate_action_plan(_assessment()) == _ACTION_PLAN

    @pytest.mark.asyncio()
    async def test_api_error_becomes_upstream_error(self) -> None:
        """SDK errors surface as UpstreamError."""
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        create = AsyncMock(side_effect=anthropic.APIConnectionError(request=request))
        with pytest.raises(UpstreamError):
            await _client(create).generate_analysis(_assessment())

    @pytest.mark.asyncio()
    async def test_reply_without_text_is_malformed(self) -> None:
        """A reply with no text block is malformed."""
        create = AsyncMock(return_value=SimpleNamespace(content=[], stop_reason="max_tokens"))
        with pytest.raises(MalformedResponseError):
            await _client(create).generate_action_plan(_assessment())
