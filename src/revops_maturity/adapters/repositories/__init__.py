"""Repository sub-package for the RevOps maturity service."""

from revops_maturity.adapters.repositories.assessment_repository import AssessmentStore

__all__ = ["AssessmentStore"]
