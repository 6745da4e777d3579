"""Abstract interfaces (Protocol classes) for the RevOps maturity service.

Services depend on these interfaces, not concrete implementations, so the
storage backend and the AI client can be swapped or mocked in tests. The
concrete store lives in ``adapters/repositories/assessment_repository.py``
and the Claude client in ``adapters/ai_client.py``.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from revops_maturity.core.models import Assessment
from revops_maturity.core.scoring import DimensionScores


@dataclass(frozen=True)
class LeadInfo:
    """Optional contact details captured with a submission."""

    name: str | None = None
    email: str | None = None
    company: str | None = None
    role: str | None = None


@dataclass(frozen=True)
class NewAssessment:
    """Everything needed to persist a freshly scored submission."""

    id: str
    answers: dict[str, float]
    scores: DimensionScores
    maturity_level: str
    lead: LeadInfo = field(default_factory=LeadInfo)


@runtime_checkable
class IAssessmentStore(Protocol):
    """Storage contract for assessments and analytics events.

    Every operation is a single independent statement; no method spans a
    multi-statement transaction.
    """

    async def insert(self, record: NewAssessment) -> Assessment:
        """Persist a new assessment. Raises ConstraintViolationError on duplicate id."""
        ...

    async def get(self, assessment_id: str) -> Assessment | None:
        """Retrieve an assessment by id."""
        ...

    async def update_ai(
        self,
        assessment_id: str,
        analysis: dict[str, Any] | None,
        action_plan: dict[str, Any] | None,
    ) -> bool:
        """Attach AI output and stamp ai_generated_at. Returns False if no row matched."""
        ...

    async def get_all_scores(self) -> list[DimensionScores]:
        """Return the dimension and overall scores of every stored assessment."""
        ...

    async def get_count(self) -> int:
        """Return the number of stored assessments."""
        ...

    async def get_stats(self) -> dict[str, Any]:
        """Return the admin statistics bundle."""
        ...

    async def get_assessments(self, page: int, limit: int) -> dict[str, Any]:
        """Return one page of assessments, newest first."""
        ...

    async def get_all_for_export(self) -> list[dict[str, Any]]:
        """Return every assessment projected to the export columns, newest first."""
        ...

    async def track_event(
        self,
        event_type: str,
        assessment_id: str | None = None,
        metadata: Any | None = None,
    ) -> None:
        """Append an analytics event."""
        ...

    async def get_event_stats(self) -> list[dict[str, Any]]:
        """Return event counts grouped by event type."""
        ...


@runtime_checkable
class IEnrichmentClient(Protocol):
    """Interface for the generative-model enrichment client."""

    @property
    def is_configured(self) -> bool:
        """True when an API credential is available."""
        ...

    async def generate_analysis(self, assessment: Assessment) -> dict[str, Any]:
        """Produce narrative, strengths, gaps and recommendations."""
        ...

    async def generate_action_plan(self, assessment: Assessment) -> dict[str, Any]:
        """Produce a phased 90-day action plan."""
        ...
