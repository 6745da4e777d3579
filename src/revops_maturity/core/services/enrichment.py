"""Background AI enrichment of stored assessments.

``EnrichmentCoordinator.run`` is scheduled after the submission response
has been sent. It runs both model calls concurrently, logs whichever
fails, and writes back whatever succeeded. Nothing it does is allowed to
raise into the scheduler.

A single-flight guard keyed by assessment id stops the automatic
post-submission trigger and the manual ``generate-ai`` trigger from
issuing duplicate upstream calls within one process.
"""

import asyncio
from typing import Any

from revops_maturity.core.interfaces import IAssessmentStore, IEnrichmentClient
from revops_maturity.errors import AIEnrichmentError, UnconfiguredError
from revops_maturity.observability import get_logger

logger = get_logger(__name__)


class EnrichmentCoordinator:
    """Runs and de-duplicates AI enrichment for assessments.

    Args:
        store: Assessment store used to load and update records.
        ai_client: Enrichment client producing analysis and action plans.
    """

    def __init__(self, store: IAssessmentStore, ai_client: IEnrichmentClient) -> None:
        self._store = store
        self._ai_client = ai_client
        self._in_flight: set[str] = set()

    @property
    def is_available(self) -> bool:
        """True when the AI client has a credential."""
        return self._ai_client.is_configured

    def is_in_flight(self, assessment_id: str) -> bool:
        """Return True while enrichment for this id is running."""
        return assessment_id in self._in_flight

    async def run(self, assessment_id: str) -> bool:
        """Generate and store AI content for one assessment.

        Args:
            assessment_id: Id of a stored assessment.

        Returns:
            True if AI content was written, False if the run was skipped,
            found nothing to enrich, or both calls failed.
        """
        if assessment_id in self._in_flight:
            logger.info("AI enrichment already in flight, skipping", assessment_id=assessment_id)
            return False

        self._in_flight.add(assessment_id)
        try:
            return await self._enrich(assessment_id)
        except Exception:
            logger.exception("AI enrichment crashed", assessment_id=assessment_id)
            return False
        finally:
            self._in_flight.discard(assessment_id)

    async def _enrich(self, assessment_id: str) -> bool:
        assessment = await self._store.get(assessment_id)
        if assessment is None:
            logger.warning("AI enrichment target not found", assessment_id=assessment_id)
            return False

        analysis_result, action_plan_result = await asyncio.gather(
            self._ai_client.generate_analysis(assessment),
            self._ai_client.generate_action_plan(assessment),
            return_exceptions=True,
        )
        analysis = _outcome(analysis_result, assessment_id, "analysis")
        action_plan = _outcome(action_plan_result, assessment_id, "action_plan")

        if analysis is None and action_plan is None:
            return False

        return await self._store.update_ai(assessment_id, analysis, action_plan)


def _outcome(
    result: dict[str, Any] | BaseException,
    assessment_id: str,
    operation: str,
) -> dict[str, Any] | None:
    """Unwrap a gather result, logging failures and mapping them to None."""
    if not isinstance(result, BaseException):
        return result

    if isinstance(result, (AIEnrichmentError, UnconfiguredError)):
        logger.warning(
            "AI generation failed",
            assessment_id=assessment_id,
            operation=operation,
            error_type=type(result).__name__,
            error=str(result),
        )
    else:
        logger.error(
            "AI generation raised unexpectedly",
            assessment_id=assessment_id,
            operation=operation,
            exc_info=result,
        )
    return None
