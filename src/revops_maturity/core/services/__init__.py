"""Services package for the RevOps maturity service."""

from revops_maturity.core.services.admin_service import AdminService
from revops_maturity.core.services.assessment_service import AssessmentService
from revops_maturity.core.services.enrichment import EnrichmentCoordinator

__all__ = [
    "AdminService",
    "AssessmentService",
    "EnrichmentCoordinator",
]
