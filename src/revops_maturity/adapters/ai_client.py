"""Claude-backed enrichment client.

Builds prompts from a stored assessment, sends a single ``messages.create``
request per operation and parses the JSON object the model is asked to
reply with. There is no retry and no streaming; any failure surfaces as an
``AIEnrichmentError`` subclass for the caller to log.
"""

import json
from dataclasses import dataclass
from typing import Any

import anthropic

from revops_maturity.core.models import Assessment
from revops_maturity.core.scoring import DIMENSION_IDS
from revops_maturity.errors import MalformedResponseError, UnconfiguredError, UpstreamError
from revops_maturity.observability import get_logger

logger = get_logger(__name__)

DIMENSION_NAMES: dict[str, str] = {
    "strategy": "Strategy & Leadership",
    "process": "Processes",
    "data": "Data & Analytics",
    "tech": "Technology & Tools",
    "people": "People & Culture",
    "journey": "Customer Journey",
}

LEVEL_DESCRIPTIONS: dict[str, str] = {
    "Ad Hoc": "Activities are sporadic and reactive.",
    "Reactive": "The need is recognised but execution is fragmented.",
    "Defined": "Processes are documented and collaboration has started.",
    "Managed": "Data drives decisions and automation is in use.",
    "Optimized": "AI and continuous optimisation steer the operation.",
}

ANALYSIS_KEYS: tuple[str, ...] = ("narrative", "strengths", "gaps", "recommendations")
ACTION_PLAN_KEYS: tuple[str, ...] = ("summary", "weakestDimensions", "phases", "expectedOutcome")

WEAKEST_COUNT: int = 3
STRONGEST_COUNT: int = 2


@dataclass(frozen=True)
class PromptContext:
    """Prompt material derived from one assessment.

    Attributes:
        context: Multi-line summary of the organisation and its scores.
        weakest: ``(dimension, score)`` pairs, lowest score first.
        strongest: ``(dimension, score)`` pairs, highest score first.
    """

    context: str
    weakest: list[tuple[str, float]]
    strongest: list[tuple[str, float]]


def build_context(assessment: Assessment) -> PromptContext:
    """Summarise an assessment for prompting.

    Args:
        assessment: Stored assessment row.

    Returns:
        PromptContext with the summary text and the weakest and strongest
        dimensions.
    """
    dimensions = [
        (dimension, getattr(assessment, f"score_{dimension}")) for dimension in DIMENSION_IDS
    ]
    ascending = sorted(dimensions, key=lambda item: item[1])
    weakest = ascending[:WEAKEST_COUNT]
    strongest = list(reversed(ascending[-STRONGEST_COUNT:]))

    lines = [
        f"Organisation: {assessment.lead_company or 'Unknown'}",
        f"Role: {assessment.lead_role or 'Unknown'}",
        f"Overall score: {assessment.score_overall}/5.0 ({assessment.maturity_level})",
        f"Level description: {LEVEL_DESCRIPTIONS.get(assessment.maturity_level, '')}",
        "",
        "Scores by dimension:",
        *[f"- {DIMENSION_NAMES[dimension]}: {score}/5.0" for dimension, score in dimensions],
    ]
    return PromptContext(context="\n".join(lines), weakest=weakest, strongest=strongest)


def _describe(items: list[tuple[str, float]]) -> str:
    return ", ".join(f"{DIMENSION_NAMES[dimension]} ({score})" for dimension, score in items)


def build_analysis_prompt(prompt_context: PromptContext) -> str:
    """Prompt asking for a narrative analysis with strengths, gaps and recommendations."""
    return f"""You are a Revenue Operations expert. Analyse the results of the following organisation's RevOps maturity assessment and produce a JSON analysis.

{prompt_context.context}

Produce JSON in the following shape (reply with JSON ONLY, no other text):
{{
  "narrative": "2-3 paragraph overall analysis of the organisation's RevOps maturity. Be concrete and practical.",
  "strengths": [
    {{"dimension": "dimension_name", "insight": "Why this is a strength and how to leverage it"}}
  ],
  "gaps": [
    {{"dimension": "dimension_name", "risk": "The risk this creates", "impact": "Concrete business impact"}}
  ],
  "recommendations": [
    {{"priority": 1, "action": "Concrete action", "rationale": "Why this matters right now"}}
  ]
}}

Strengths (top {STRONGEST_COUNT}): {_describe(prompt_context.strongest)}
Weaknesses (bottom {WEAKEST_COUNT}): {_describe(prompt_context.weakest)}

Give 2 strengths, 2-3 gaps and 3-4 recommendations."""


def build_action_plan_prompt(prompt_context: PromptContext) -> str:
    """Prompt asking for a three-phase 90-day action plan on the weakest dimensions."""
    focus = "\n".join(
        f"- {DIMENSION_NAMES[dimension]}: {score}/5.0"
        for dimension, score in prompt_context.weakest
    )
    return f"""You are a Revenue Operations consultant. Create a 90-day action plan for an organisation that has completed a RevOps maturity assessment.

{prompt_context.context}

Weakest areas to focus on:
{focus}

Produce JSON in the following shape (reply with JSON ONLY, no other text):
{{
  "summary": "Short summary of the plan's focus",
  "weakestDimensions": ["dimension1", "dimension2"],
  "phases": [
    {{
      "name": "Phase 1: Foundation (Weeks 1-4)",
      "focus": "What to focus on",
      "steps": [
        {{"week": "1-2", "action": "Concrete action", "detail": "More detailed description", "dimension": "dimension_name"}},
        {{"week": "3-4", "action": "Concrete action", "detail": "More detailed description", "dimension": "dimension_name"}}
      ]
    }},
    {{
      "name": "Phase 2: Development (Weeks 5-8)",
      "focus": "What to focus on",
      "steps": [...]
    }},
    {{
      "name": "Phase 3: Optimisation (Weeks 9-12)",
      "focus": "What to focus on",
      "steps": [...]
    }}
  ],
  "expectedOutcome": "What should be achieved after 90 days"
}}

Be concrete and practical. Give 2-3 steps in each phase."""


def parse_json_reply(text: str, required_keys: tuple[str, ...]) -> dict[str, Any]:
    """Parse a model reply into a JSON object carrying the required keys.

    Markdown code fences around the JSON are tolerated.

    Args:
        text: Raw reply text.
        required_keys: Keys the object must contain.

    Returns:
        The parsed object.

    Raises:
        MalformedResponseError: If the text is not a JSON object or lacks a
            required key.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.startswith("json"):
            cleaned = cleaned[len("json"):]
        cleaned = cleaned.strip()

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Model reply is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Model reply is a JSON {type(data).__name__}, expected an object"
        )

    missing = [key for key in required_keys if key not in data]
    if missing:
        raise MalformedResponseError(f"Model reply is missing keys: {', '.join(missing)}")
    return data


class ClaudeEnrichmentClient:
    """Generates AI analysis and action plans with the Anthropic Messages API.

    The credential is checked once at construction: without an API key the
    client is unconfigured and both operations raise ``UnconfiguredError``
    without touching the network.

    Args:
        api_key: Anthropic API key; empty disables the client.
        model: Model identifier.
        max_tokens: Response token ceiling per request.
        client: Pre-built ``AsyncAnthropic`` instance, mainly for tests.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = 2000,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self._model = model
        self._max_tokens = max_tokens
        if client is not None:
            self._client: anthropic.AsyncAnthropic | None = client
        elif api_key:
            self._client = anthropic.AsyncAnthropic(api_key=api_key)
        else:
            self._client = None

    @property
    def is_configured(self) -> bool:
        """True when an API client is available."""
        return self._client is not None

    async def generate_analysis(self, assessment: Assessment) -> dict[str, Any]:
        """Generate narrative analysis, strengths, gaps and recommendations.

        Args:
            assessment: Stored assessment row.

        Returns:
            Dict with ``narrative``, ``strengths``, ``gaps`` and ``recommendations``.

        Raises:
            UnconfiguredError: If no API key is configured.
            UpstreamError: If the API call fails.
            MalformedResponseError: If the reply is not the expected JSON object.
        """
        prompt = build_analysis_prompt(build_context(assessment))
        text = await self._complete(prompt, assessment.id, "analysis")
        return parse_json_reply(text, ANALYSIS_KEYS)

    async def generate_action_plan(self, assessment: Assessment) -> dict[str, Any]:
        """Generate a three-phase 90-day action plan.

        Args:
            assessment: Stored assessment row.

        Returns:
            Dict with ``summary``, ``weakestDimensions``, ``phases`` and
            ``expectedOutcome``.

        Raises:
            UnconfiguredError: If no API key is configured.
            UpstreamError: If the API call fails.
            MalformedResponseError: If the reply is not the expected JSON object.
        """
        prompt = build_action_plan_prompt(build_context(assessment))
        text = await self._complete(prompt, assessment.id, "action_plan")
        return parse_json_reply(text, ACTION_PLAN_KEYS)

    async def _complete(self, prompt: str, assessment_id: str, operation: str) -> str:
        if self._client is None:
            raise UnconfiguredError("Claude API key not configured")

        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            raise UpstreamError(f"Claude API call failed: {exc}") from exc

        text_blocks = [
            block.text for block in response.content if getattr(block, "type", None) == "text"
        ]
        if not text_blocks:
            raise MalformedResponseError("Model reply contained no text content")

        logger.debug(
            "Claude reply received",
            assessment_id=assessment_id,
            operation=operation,
            model=self._model,
            stop_reason=getattr(response, "stop_reason", None),
        )
        return text_blocks[0]
