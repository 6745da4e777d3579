"""SQLAlchemy implementation of the assessment store.

Implements ``IAssessmentStore`` using SQLAlchemy 2.0 async ORM. Every
public method opens its own short-lived session and runs a single
statement (or a single read-only batch), so the store is safe to share
across concurrent requests and background tasks. All queries are
parameterised.
"""

import math
from collections import defaultdict
from typing import Any

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from revops_maturity.core.export import EXPORT_COLUMNS
from revops_maturity.core.interfaces import NewAssessment
from revops_maturity.core.models import AnalyticsEvent, Assessment, utcnow
from revops_maturity.core.scoring import DIMENSION_IDS, DimensionScores, round_half_up
from revops_maturity.errors import ConstraintViolationError
from revops_maturity.observability import get_logger

logger = get_logger(__name__)

RECENT_LIMIT: int = 20
WEEKLY_TREND_WEEKS: int = 12

# Overall-score band edges shared with the maturity levels: <1.5, <2.5, <3.5, <4.5, >=4.5
_BAND_EDGES: tuple[float, ...] = (1.5, 2.5, 3.5, 4.5)

_LIST_COLUMNS: tuple[str, ...] = (
    "id",
    "created_at",
    "lead_name",
    "lead_email",
    "lead_company",
    "lead_role",
    "score_overall",
    "maturity_level",
    "score_strategy",
    "score_process",
    "score_data",
    "score_tech",
    "score_people",
    "score_journey",
)

_RECENT_COLUMNS: tuple[str, ...] = (
    "id",
    "created_at",
    "lead_name",
    "lead_company",
    "lead_email",
    "score_overall",
    "maturity_level",
)


def _columns(names: tuple[str, ...]) -> list[Any]:
    return [getattr(Assessment, name) for name in names]


def _score_column(dimension: str) -> Any:
    return getattr(Assessment, f"score_{dimension}")


def _rounded_or_none(value: float | None) -> float | None:
    return None if value is None else round_half_up(float(value))


class AssessmentStore:
    """Persistence for assessments and analytics events.

    Args:
        session_factory: Async session factory created with
            ``expire_on_commit=False`` so returned ORM objects stay readable
            after their session closes.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # -----------------------------------------------------------------------
    # Assessments
    # -----------------------------------------------------------------------

    async def insert(self, record: NewAssessment) -> Assessment:
        """Persist a newly scored assessment.

        Args:
            record: The scored submission.

        Returns:
            The persisted Assessment row.

        Raises:
            ConstraintViolationError: If an assessment with the same id exists.
        """
        scores = record.scores
        row = Assessment(
            id=record.id,
            created_at=utcnow(),
            lead_name=record.lead.name or None,
            lead_email=record.lead.email or None,
            lead_company=record.lead.company or None,
            lead_role=record.lead.role or None,
            answers=dict(record.answers),
            score_strategy=scores.strategy,
            score_process=scores.process,
            score_data=scores.data,
            score_tech=scores.tech,
            score_people=scores.people,
            score_journey=scores.journey,
            score_overall=scores.overall,
            maturity_level=record.maturity_level,
        )

        async with self._session_factory() as session:
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise ConstraintViolationError(
                    f"Assessment {record.id!r} already exists"
                ) from exc

        logger.info(
            "Assessment persisted",
            assessment_id=record.id,
            overall_score=scores.overall,
            maturity_level=record.maturity_level,
        )
        return row

    async def get(self, assessment_id: str) -> Assessment | None:
        """Retrieve an assessment by id.

        Args:
            assessment_id: Assessment id.

        Returns:
            The Assessment or None if it does not exist.
        """
        async with self._session_factory() as session:
            return await session.get(Assessment, assessment_id)

    async def update_ai(
        self,
        assessment_id: str,
        analysis: dict[str, Any] | None,
        action_plan: dict[str, Any] | None,
    ) -> bool:
        """Attach AI output to an assessment and stamp ai_generated_at.

        Args:
            assessment_id: Assessment id.
            analysis: Generated analysis, or None if that call failed.
            action_plan: Generated action plan, or None if that call failed.

        Returns:
            True if a row was updated, False if the id does not exist.
        """
        async with self._session_factory() as session:
            result = await session.execute(
                update(Assessment)
                .where(Assessment.id == assessment_id)
                .values(
                    ai_analysis=analysis,
                    ai_action_plan=action_plan,
                    ai_generated_at=utcnow(),
                )
            )
            updated = bool(result.rowcount)
            await session.commit()

        if updated:
            logger.info(
                "AI content stored",
                assessment_id=assessment_id,
                has_analysis=analysis is not None,
                has_action_plan=action_plan is not None,
            )
        else:
            logger.warning("AI update matched no assessment", assessment_id=assessment_id)
        return updated

    async def get_all_scores(self) -> list[DimensionScores]:
        """Load the scores of every stored assessment (full scan)."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(
                    *[_score_column(dimension) for dimension in DIMENSION_IDS],
                    Assessment.score_overall,
                )
            )
            rows = result.all()

        return [
            DimensionScores(*(float(value) for value in row))
            for row in rows
        ]

    async def get_count(self) -> int:
        """Count stored assessments."""
        async with self._session_factory() as session:
            result = await session.execute(select(func.count(Assessment.id)))
            return int(result.scalar_one())

    async def get_stats(self) -> dict[str, Any]:
        """Build the admin statistics bundle.

        Returns:
            Dict with keys ``total``, ``avgScores``, ``distribution``,
            ``recent`` (20 newest rows) and ``weekly`` (ISO-week trend,
            newest first, at most 12 weeks).
        """
        band_sums = [
            func.sum(case((Assessment.score_overall < _BAND_EDGES[0], 1), else_=0)),
            *[
                func.sum(
                    case(
                        (
                            (Assessment.score_overall >= low) & (Assessment.score_overall < high),
                            1,
                        ),
                        else_=0,
                    )
                )
                for low, high in zip(_BAND_EDGES, _BAND_EDGES[1:])
            ],
            func.sum(case((Assessment.score_overall >= _BAND_EDGES[-1], 1), else_=0)),
        ]

        async with self._session_factory() as session:
            total = int(
                (await session.execute(select(func.count(Assessment.id)))).scalar_one()
            )
            averages = (
                await session.execute(
                    select(
                        *[func.avg(_score_column(dimension)) for dimension in DIMENSION_IDS],
                        func.avg(Assessment.score_overall),
                    )
                )
            ).one()
            bands = (await session.execute(select(*band_sums))).one()
            recent = (
                await session.execute(
                    select(*_columns(_RECENT_COLUMNS))
                    .order_by(Assessment.created_at.desc())
                    .limit(RECENT_LIMIT)
                )
            ).mappings().all()
            trend_rows = (
                await session.execute(
                    select(Assessment.created_at, Assessment.score_overall)
                )
            ).all()

        avg_scores = {
            key: _rounded_or_none(value)
            for key, value in zip((*DIMENSION_IDS, "overall"), averages)
        }
        distribution = {
            f"level{index + 1}": int(count or 0) for index, count in enumerate(bands)
        }

        return {
            "total": total,
            "avgScores": avg_scores,
            "distribution": distribution,
            "recent": [dict(row) for row in recent],
            "weekly": _weekly_trend(trend_rows),
        }

    async def get_assessments(self, page: int, limit: int) -> dict[str, Any]:
        """Return one page of assessments ordered newest first.

        Args:
            page: 1-based page number.
            limit: Page size; the caller caps it.

        Returns:
            Dict with ``items``, ``total``, ``page`` and ``pages``.
        """
        offset = (page - 1) * limit
        async with self._session_factory() as session:
            items = (
                await session.execute(
                    select(*_columns(_LIST_COLUMNS))
                    .order_by(Assessment.created_at.desc())
                    .limit(limit)
                    .offset(offset)
                )
            ).mappings().all()
            total = int(
                (await session.execute(select(func.count(Assessment.id)))).scalar_one()
            )

        return {
            "items": [dict(item) for item in items],
            "total": total,
            "page": page,
            "pages": math.ceil(total / limit) if limit else 0,
        }

    async def get_all_for_export(self) -> list[dict[str, Any]]:
        """Return every assessment projected to ``EXPORT_COLUMNS``, newest first."""
        async with self._session_factory() as session:
            rows = (
                await session.execute(
                    select(*_columns(EXPORT_COLUMNS)).order_by(Assessment.created_at.desc())
                )
            ).mappings().all()
        return [dict(row) for row in rows]

    # -----------------------------------------------------------------------
    # Analytics events
    # -----------------------------------------------------------------------

    async def track_event(
        self,
        event_type: str,
        assessment_id: str | None = None,
        metadata: Any | None = None,
    ) -> None:
        """Append an analytics event.

        Args:
            event_type: Free-form event tag.
            assessment_id: Optional advisory reference to an assessment.
            metadata: Optional JSON-serialisable payload.
        """
        async with self._session_factory() as session:
            session.add(
                AnalyticsEvent(
                    event_type=event_type,
                    assessment_id=assessment_id or None,
                    event_metadata=metadata,
                    created_at=utcnow(),
                )
            )
            await session.commit()

        logger.debug("Analytics event stored", event_type=event_type, assessment_id=assessment_id)

    async def get_event_stats(self) -> list[dict[str, Any]]:
        """Count events per event type."""
        async with self._session_factory() as session:
            rows = (
                await session.execute(
                    select(AnalyticsEvent.event_type, func.count(AnalyticsEvent.id).label("count"))
                    .group_by(AnalyticsEvent.event_type)
                    .order_by(AnalyticsEvent.event_type)
                )
            ).all()
        return [{"event_type": event_type, "count": int(count)} for event_type, count in rows]


def _weekly_trend(rows: list[Any]) -> list[dict[str, Any]]:
    """Bucket (created_at, score_overall) rows by ISO week, newest first."""
    buckets: dict[str, list[float]] = defaultdict(list)
    for created_at, score_overall in rows:
        iso_year, iso_week, _ = created_at.isocalendar()
        buckets[f"{iso_year}-W{iso_week:02d}"].append(float(score_overall))

    weeks = sorted(buckets, reverse=True)[:WEEKLY_TREND_WEEKS]
    return [
        {
            "week": week,
            "count": len(buckets[week]),
            "avg_overall": round_half_up(sum(buckets[week]) / len(buckets[week])),
        }
        for week in weeks
    ]
