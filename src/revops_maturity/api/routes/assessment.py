"""FastAPI router for the public assessment flow.

All routes are thin: they parse inputs, delegate to AssessmentService, and
schedule background work. No business logic lives here.

API prefix: /api
Auth: None. The questionnaire is anonymous lead capture.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Path, status

from revops_maturity.api.dependencies import get_assessment_service
from revops_maturity.api.schemas.assessment import (
    AIContentResponse,
    AssessmentDetailResponse,
    GenerateAIResponse,
    OkResponse,
    SubmitAssessmentRequest,
    SubmitAssessmentResponse,
    TrackEventRequest,
)
from revops_maturity.core.interfaces import LeadInfo
from revops_maturity.core.services.assessment_service import (
    AI_STATUS_GENERATING,
    ASSESSMENT_COMPLETED_EVENT,
    AssessmentService,
)
from revops_maturity.observability import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Assessments"])

_ASSESSMENT_ID = Path(..., description="Assessment id (UUID string)")


# ---------------------------------------------------------------------------
# Assessment lifecycle
# ---------------------------------------------------------------------------


@router.post(
    "/assessments",
    response_model=SubmitAssessmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Submit a completed questionnaire",
)
async def submit_assessment(
    body: SubmitAssessmentRequest,
    background_tasks: BackgroundTasks,
    service: AssessmentService = Depends(get_assessment_service),
) -> SubmitAssessmentResponse:
    """Score, store and benchmark a questionnaire submission.

    The ``assessment_completed`` analytics event and, when configured, AI
    enrichment run after the response has been sent.
    """
    lead = LeadInfo(**body.lead.model_dump()) if body.lead else None
    result = await service.submit_assessment(answers=body.answers, lead=lead)

    background_tasks.add_task(
        service.track_event_safely, ASSESSMENT_COMPLETED_EVENT, result["id"]
    )
    if service.ai_enabled:
        background_tasks.add_task(service.enrich, result["id"])

    return SubmitAssessmentResponse(**result)


@router.get(
    "/assessments/{assessment_id}",
    response_model=AssessmentDetailResponse,
    summary="Get a stored assessment result",
)
async def get_assessment(
    assessment_id: str = _ASSESSMENT_ID,
    service: AssessmentService = Depends(get_assessment_service),
) -> AssessmentDetailResponse:
    """Return stored scores with a benchmark computed against today's data."""
    result = await service.get_assessment(assessment_id)
    return AssessmentDetailResponse(**result)


@router.get(
    "/assessments/{assessment_id}/ai",
    response_model=AIContentResponse,
    response_model_exclude_unset=True,
    summary="Get AI analysis and action plan",
)
async def get_ai_content(
    assessment_id: str = _ASSESSMENT_ID,
    service: AssessmentService = Depends(get_assessment_service),
) -> AIContentResponse:
    """Return the AI payload once generated, otherwise ``{"status": "generating"}``.

    When ready, ``analysis`` and ``actionPlan`` are always present; either
    may be null if its generation failed.
    """
    result = await service.get_ai_content(assessment_id)
    return AIContentResponse(**result)


@router.post(
    "/assessments/{assessment_id}/generate-ai",
    response_model=GenerateAIResponse,
    summary="Trigger AI generation manually",
)
async def generate_ai(
    background_tasks: BackgroundTasks,
    assessment_id: str = _ASSESSMENT_ID,
    service: AssessmentService = Depends(get_assessment_service),
) -> GenerateAIResponse:
    """Schedule AI enrichment unless it is already done or unavailable."""
    outcome = await service.request_ai_generation(assessment_id)
    if outcome == AI_STATUS_GENERATING:
        background_tasks.add_task(service.enrich, assessment_id)

    logger.info("Manual AI generation requested", assessment_id=assessment_id, outcome=outcome)
    return GenerateAIResponse(status=outcome)


# ---------------------------------------------------------------------------
# Public benchmarks and analytics
# ---------------------------------------------------------------------------


@router.get(
    "/benchmarks",
    summary="Aggregate benchmark statistics",
)
async def get_benchmarks(
    service: AssessmentService = Depends(get_assessment_service),
) -> dict[str, Any]:
    """Per-dimension averages, medians and distributions across all assessments."""
    return await service.get_public_benchmarks()


@router.post(
    "/events",
    response_model=OkResponse,
    summary="Record a front-end analytics event",
)
async def track_event(
    body: TrackEventRequest,
    service: AssessmentService = Depends(get_assessment_service),
) -> OkResponse:
    """Store an analytics event such as ``share_clicked``."""
    await service.track_event(body.type, body.assessment_id, body.metadata)
    return OkResponse(ok=True)
