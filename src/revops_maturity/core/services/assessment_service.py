"""Service layer orchestrating the public RevOps maturity assessment flow.

Implements:
    1. submit_assessment(): score, persist and benchmark a submission
    2. get_assessment(): stored scores plus a fresh benchmark
    3. get_ai_content(): AI enrichment status and payload
    4. request_ai_generation(): decide whether a manual trigger should run
    5. get_public_benchmarks(): aggregate statistics for the landing page
    6. track_event(): analytics events

Background work (event tracking after a submission, AI enrichment) is
scheduled by the routes layer; this module stays free of FastAPI imports.
"""

import uuid
from typing import Any, Mapping

from revops_maturity.core.benchmarks import BenchmarkEngine
from revops_maturity.core.interfaces import IAssessmentStore, LeadInfo, NewAssessment
from revops_maturity.core.models import Assessment
from revops_maturity.core.scoring import (
    DIMENSION_IDS,
    DimensionScores,
    calculate_scores,
    get_maturity_level,
)
from revops_maturity.core.services.enrichment import EnrichmentCoordinator
from revops_maturity.errors import NotFoundError
from revops_maturity.observability import get_logger

logger = get_logger(__name__)

ASSESSMENT_COMPLETED_EVENT: str = "assessment_completed"

AI_STATUS_READY: str = "ready"
AI_STATUS_GENERATING: str = "generating"
AI_STATUS_UNAVAILABLE: str = "unavailable"


def share_url(assessment_id: str) -> str:
    """Relative URL of the public share page for an assessment."""
    return f"/results/{assessment_id}"


def stored_scores(assessment: Assessment) -> DimensionScores:
    """Read the score columns of a stored assessment."""
    return DimensionScores(
        **{dimension: getattr(assessment, f"score_{dimension}") for dimension in DIMENSION_IDS},
        overall=assessment.score_overall,
    )


class AssessmentService:
    """Orchestrates scoring, persistence, benchmarking and AI status.

    Args:
        store: Assessment store.
        benchmark_engine: Benchmark engine reading from the same store.
        enrichment: Coordinator for AI enrichment runs.
    """

    def __init__(
        self,
        store: IAssessmentStore,
        benchmark_engine: BenchmarkEngine,
        enrichment: EnrichmentCoordinator,
    ) -> None:
        self._store = store
        self._benchmarks = benchmark_engine
        self._enrichment = enrichment

    @property
    def ai_enabled(self) -> bool:
        """True when AI enrichment is configured."""
        return self._enrichment.is_available

    async def submit_assessment(
        self,
        answers: Mapping[str, float],
        lead: LeadInfo | None = None,
    ) -> dict[str, Any]:
        """Score and persist a questionnaire submission.

        Args:
            answers: Mapping of ``<dimension>_<index>`` keys to ratings.
            lead: Optional contact details.

        Returns:
            Dict with ``id``, ``scores``, ``level``, ``benchmark`` and ``share_url``.
        """
        scores = calculate_scores(answers)
        level = get_maturity_level(scores.overall)
        assessment_id = str(uuid.uuid4())

        await self._store.insert(
            NewAssessment(
                id=assessment_id,
                answers=dict(answers),
                scores=scores,
                maturity_level=level.name,
                lead=lead or LeadInfo(),
            )
        )

        benchmark = await self._benchmarks.get_benchmarks(scores)

        logger.info(
            "Assessment submitted",
            assessment_id=assessment_id,
            overall_score=scores.overall,
            maturity_level=level.name,
            benchmark_available=benchmark["available"],
            has_lead=lead is not None,
        )

        return {
            "id": assessment_id,
            "scores": scores.to_dict(),
            "level": level.to_dict(),
            "benchmark": benchmark,
            "share_url": share_url(assessment_id),
        }

    async def get_assessment(self, assessment_id: str) -> dict[str, Any]:
        """Stored result with a freshly computed benchmark.

        Raises:
            NotFoundError: If the id does not exist.
        """
        assessment = await self._require(assessment_id)
        scores = stored_scores(assessment)
        benchmark = await self._benchmarks.get_benchmarks(scores)

        return {
            "id": assessment.id,
            "created_at": assessment.created_at,
            "scores": scores.to_dict(),
            "level": get_maturity_level(scores.overall).to_dict(),
            "maturity_level": assessment.maturity_level,
            "benchmark": benchmark,
            "share_url": share_url(assessment.id),
            "lead": {"name": assessment.lead_name, "company": assessment.lead_company},
        }

    async def get_ai_content(self, assessment_id: str) -> dict[str, Any]:
        """AI payload when generation has completed, else a ``generating`` status.

        Raises:
            NotFoundError: If the id does not exist.
        """
        assessment = await self._require(assessment_id)
        if assessment.ai_generated_at is None:
            return {"status": AI_STATUS_GENERATING}
        return {
            "status": AI_STATUS_READY,
            "analysis": assessment.ai_analysis,
            "action_plan": assessment.ai_action_plan,
        }

    async def request_ai_generation(self, assessment_id: str) -> str:
        """Decide the outcome of a manual AI generation request.

        Returns ``generating`` when the caller should schedule an enrichment
        run; stored AI fields are never touched here.

        Raises:
            NotFoundError: If the id does not exist.
        """
        assessment = await self._require(assessment_id)
        if assessment.ai_generated_at is not None:
            return AI_STATUS_READY
        if not self.ai_enabled:
            return AI_STATUS_UNAVAILABLE
        return AI_STATUS_GENERATING

    async def enrich(self, assessment_id: str) -> None:
        """Background task body: run AI enrichment for one assessment."""
        await self._enrichment.run(assessment_id)

    async def get_public_benchmarks(self) -> dict[str, Any]:
        """Aggregate statistics, or ``{"totalAssessments": 0}`` when empty."""
        aggregates = await self._benchmarks.get_aggregates()
        return aggregates or {"totalAssessments": 0}

    async def track_event(
        self,
        event_type: str,
        assessment_id: str | None = None,
        metadata: Any | None = None,
    ) -> None:
        """Record an analytics event, propagating storage failures."""
        await self._store.track_event(event_type, assessment_id, metadata)

    async def track_event_safely(
        self,
        event_type: str,
        assessment_id: str | None = None,
        metadata: Any | None = None,
    ) -> None:
        """Record an analytics event, logging instead of raising on failure."""
        try:
            await self._store.track_event(event_type, assessment_id, metadata)
        except Exception:
            logger.exception(
                "Event tracking failed",
                event_type=event_type,
                assessment_id=assessment_id,
            )

    async def _require(self, assessment_id: str) -> Assessment:
        assessment = await self._store.get(assessment_id)
        if assessment is None:
            raise NotFoundError(f"Assessment {assessment_id} not found")
        return assessment
