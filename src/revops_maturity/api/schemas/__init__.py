"""Request and response schemas for the RevOps maturity API."""

from revops_maturity.api.schemas.assessment import (
    AIContentResponse,
    AssessmentDetailResponse,
    GenerateAIResponse,
    LeadSchema,
    LeadSummarySchema,
    LoginRequest,
    MaturityLevelSchema,
    OkResponse,
    SubmitAssessmentRequest,
    SubmitAssessmentResponse,
    TokenResponse,
    TrackEventRequest,
)

__all__ = [
    "AIContentResponse",
    "AssessmentDetailResponse",
    "GenerateAIResponse",
    "LeadSchema",
    "LeadSummarySchema",
    "LoginRequest",
    "MaturityLevelSchema",
    "OkResponse",
    "SubmitAssessmentRequest",
    "SubmitAssessmentResponse",
    "TokenResponse",
    "TrackEventRequest",
]
