"""ORM models package for the RevOps maturity service."""

from revops_maturity.core.models.assessment import (
    AnalyticsEvent,
    Assessment,
    Base,
    utcnow,
)

__all__ = [
    "AnalyticsEvent",
    "Assessment",
    "Base",
    "utcnow",
]
