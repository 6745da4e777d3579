"""SQLAlchemy ORM models for the RevOps maturity assessment.

The schema is portable across the embedded SQLite store and PostgreSQL:
JSON payloads use the generic ``JSON`` type and timestamps are set from
Python in UTC rather than by a server default.

Tables:
    assessments:      one scored questionnaire submission per row
    analytics_events: append-only funnel and interaction events
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(tz=timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all RevOps maturity tables."""


class Assessment(Base):
    """A scored self-assessment, optionally enriched with AI output.

    Core fields are written once at submission. The three ``ai_*`` columns
    are filled in later by the enrichment task; ``ai_generated_at`` being
    NULL means enrichment has not completed.

    Table: assessments
    """

    __tablename__ = "assessments"
    __table_args__ = (
        Index("idx_assessments_created_at", "created_at"),
        Index("idx_assessments_overall", "score_overall"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Opaque UUID4 generated at submission",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="Submission timestamp (UTC)",
    )
    lead_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    lead_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    lead_company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    lead_role: Mapped[str | None] = mapped_column(String(255), nullable=True)
    answers: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        comment="Raw answers: <dimension>_<index> -> rating",
    )
    score_strategy: Mapped[float] = mapped_column(Float, nullable=False)
    score_process: Mapped[float] = mapped_column(Float, nullable=False)
    score_data: Mapped[float] = mapped_column(Float, nullable=False)
    score_tech: Mapped[float] = mapped_column(Float, nullable=False)
    score_people: Mapped[float] = mapped_column(Float, nullable=False)
    score_journey: Mapped[float] = mapped_column(Float, nullable=False)
    score_overall: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Mean of the six dimension scores, one decimal",
    )
    maturity_level: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Maturity band label at submission time",
    )
    ai_analysis: Mapped[dict[str, Any] | None] = mapped_column(
        JSON(none_as_null=True),
        nullable=True,
    )
    ai_action_plan: Mapped[dict[str, Any] | None] = mapped_column(
        JSON(none_as_null=True),
        nullable=True,
    )
    ai_generated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Set when AI enrichment completed; NULL while pending",
    )


class AnalyticsEvent(Base):
    """An append-only analytics event.

    ``assessment_id`` is an advisory reference with no foreign key: events
    may point at ids that were never stored.

    Table: analytics_events
    """

    __tablename__ = "analytics_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    assessment_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    event_metadata: Mapped[Any | None] = mapped_column(
        "metadata",
        JSON(none_as_null=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
