"""Pydantic request/response schemas for the RevOps maturity API.

Python attributes are snake_case; the JSON wire format is camelCase
(``shareUrl``, ``actionPlan``, ``assessmentId``) via an alias generator.
Benchmark and admin payloads are passed through as plain dicts because
their shape is defined by the benchmark engine and the store.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialising field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared value objects
# ---------------------------------------------------------------------------


class LeadSchema(CamelModel):
    """Optional contact details submitted with the questionnaire.

    Only presence is checked; values are stored as given.
    """

    name: str | None = None
    email: str | None = None
    company: str | None = None
    role: str | None = None


class LeadSummarySchema(CamelModel):
    """Lead fields echoed back on the results page."""

    name: str | None = None
    company: str | None = None


class MaturityLevelSchema(CamelModel):
    """A maturity band.

    Attributes:
        min: Lowest overall score in the band.
        max: Highest overall score in the band.
        name: Band label.
    """

    min: float
    max: float
    name: str


# ---------------------------------------------------------------------------
# Assessments
# ---------------------------------------------------------------------------

Rating = Annotated[float, Field(ge=1, le=5, allow_inf_nan=False)]


class SubmitAssessmentRequest(CamelModel):
    """Questionnaire submission.

    Attributes:
        answers: Ratings from 1 to 5 keyed ``<dimension>_<questionIndex>``,
            e.g. ``strategy_0``. Out-of-range and non-finite values are rejected.
        lead: Optional contact details.
    """

    answers: dict[str, Rating | None] = Field(
        ...,
        description="Ratings keyed <dimension>_<questionIndex> (index 0-2), each 1-5 or null",
    )
    lead: LeadSchema | None = None


class SubmitAssessmentResponse(CamelModel):
    """Scores, level and benchmark returned right after submission."""

    id: str
    scores: dict[str, float]
    level: MaturityLevelSchema
    benchmark: dict[str, Any]
    share_url: str


class AssessmentDetailResponse(CamelModel):
    """Stored assessment with a freshly computed benchmark."""

    id: str
    created_at: datetime
    scores: dict[str, float]
    level: MaturityLevelSchema
    maturity_level: str
    benchmark: dict[str, Any]
    share_url: str
    lead: LeadSummarySchema


class AIContentResponse(CamelModel):
    """AI enrichment status, with payloads once ready.

    ``analysis`` and ``actionPlan`` are only present when ``status`` is
    ``ready``; either may be null if its generation failed.
    """

    status: str
    analysis: dict[str, Any] | None = None
    action_plan: dict[str, Any] | None = None


class GenerateAIResponse(CamelModel):
    """Outcome of a manual AI generation request: ready, generating or unavailable."""

    status: str


# ---------------------------------------------------------------------------
# Analytics events
# ---------------------------------------------------------------------------


class TrackEventRequest(CamelModel):
    """Analytics event posted by the front-end.

    Attributes:
        type: Free-form event tag, e.g. ``share_clicked``.
        assessment_id: Optional related assessment id (not validated).
        metadata: Optional arbitrary JSON payload.
    """

    type: str = Field(..., min_length=1, max_length=100)
    assessment_id: str | None = Field(default=None, max_length=36)
    metadata: Any | None = None


class OkResponse(CamelModel):
    """Generic acknowledgement."""

    ok: bool = True


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


class LoginRequest(CamelModel):
    """Admin login body."""

    password: str | None = None


class TokenResponse(CamelModel):
    """Signed admin token."""

    token: str
