"""Integration tests for AssessmentStore against a real SQLite database."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from revops_maturity.adapters.database import Database
from revops_maturity.adapters.repositories import AssessmentStore
from revops_maturity.core.interfaces import LeadInfo, NewAssessment
from revops_maturity.core.models import Assessment
from revops_maturity.core.scoring import DIMENSION_IDS, calculate_scores, get_maturity_level
from revops_maturity.errors import ConstraintViolationError


def _answers(value: float) -> dict[str, float]:
    return {f"{dimension}_{index}": value for dimension in DIMENSION_IDS for index in range(3)}


def _record(value: float = 3.0, lead: LeadInfo | None = None, assessment_id: str | None = None) -> NewAssessment:
    answers = _answers(value)
    scores = calculate_scores(answers)
    return NewAssessment(
        id=assessment_id or str(uuid.uuid4()),
        answers=answers,
        scores=scores,
        maturity_level=get_maturity_level(scores.overall).name,
        lead=lead or LeadInfo(),
    )


async def _backdate(database: Database, assessment_id: str, created_at: datetime) -> None:
    async with database.session_factory() as session:
        await session.execute(
            update(Assessment).where(Assessment.id == assessment_id).values(created_at=created_at)
        )
        await session.commit()


# ---------------------------------------------------------------------------
# Insert / get / update_ai
# ---------------------------------------------------------------------------


class TestAssessmentPersistence:
    """Single-record operations."""

    @pytest.mark.asyncio()
    async def test_insert_and_get(self, store: AssessmentStore) -> None:
        """Stored fields come back unchanged."""
        record = _record(4.0, LeadInfo(name="Ada", email="ada@example.com", company="Acme", role="CRO"))
        await store.insert(record)

        stored = await store.get(record.id)
        assert stored is not None
        assert stored.score_overall == 4.0
        assert stored.maturity_level == "Managed"
        assert stored.answers == record.answers
        assert (stored.lead_name, stored.lead_company, stored.lead_role) == ("Ada", "Acme", "CRO")
        assert stored.ai_generated_at is None
        assert stored.ai_analysis is None

    @pytest.mark.asyncio()
    async def test_empty_lead_fields_are_stored_as_null(self, store: AssessmentStore) -> None:
        """Blank lead strings become NULL."""
        record = _record(lead=LeadInfo(name="", email=None))
        await store.insert(record)
        stored = await store.get(record.id)
        assert stored is not None
        assert stored.lead_name is None

    @pytest.mark.asyncio()
    async def test_get_unknown(self, store: AssessmentStore) -> None:
        assert await store.get("does-not-exist") is None

    @pytest.mark.asyncio()
    async def test_duplicate_id_raises(self, store: AssessmentStore) -> None:
        """Re-inserting an id is a constraint violation."""
        record = _record()
        await store.insert(record)
        with pytest.raises(ConstraintViolationError):
            await store.insert(_record(assessment_id=record.id))

    @pytest.mark.asyncio()
    async def test_update_ai(self, store: AssessmentStore) -> None:
        """AI payloads are stored and the generation time stamped."""
        record = _record()
        await store.insert(record)

        assert await store.update_ai(record.id, {"narrative": "x"}, None) is True

        stored = await store.get(record.id)
        assert stored is not None
        assert stored.ai_analysis == {"narrative": "x"}
        assert stored.ai_action_plan is None
        assert stored.ai_generated_at is not None

    @pytest.mark.asyncio()
    async def test_update_ai_unknown_id(self, store: AssessmentStore) -> None:
        """Updating a missing id reports False."""
        assert await store.update_ai("does-not-exist", {"narrative": "x"}, None) is False


# ---------------------------------------------------------------------------
# Scans, listing and statistics
# ---------------------------------------------------------------------------


class TestAssessmentQueries:
    """Multi-record reads."""

    @pytest.mark.asyncio()
    async def test_get_all_scores_and_count(self, store: AssessmentStore) -> None:
        for value in (1.0, 3.0, 5.0):
            await store.insert(_record(value))

        scores = await store.get_all_scores()
        assert sorted(row.overall for row in scores) == [1.0, 3.0, 5.0]
        assert await store.get_count() == 3

    @pytest.mark.asyncio()
    async def test_pagination(self, store: AssessmentStore, database: Database) -> None:
        """25 rows, page 2 of 10 gives ten rows and three pages, newest first."""
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        ids = []
        for index in range(25):
            record = _record()
            await store.insert(record)
            await _backdate(database, record.id, base + timedelta(minutes=index))
            ids.append(record.id)

        page = await store.get_assessments(2, 10)

        assert page["total"] == 25
        assert page["page"] == 2
        assert page["pages"] == 3
        assert [item["id"] for item in page["items"]] == list(reversed(ids))[10:20]
        assert "answers" not in page["items"][0]

    @pytest.mark.asyncio()
    async def test_stats_empty(self, store: AssessmentStore) -> None:
        """An empty store reports zero counts and null averages."""
        stats = await store.get_stats()
        assert stats["total"] == 0
        assert stats["avgScores"]["overall"] is None
        assert stats["distribution"] == {f"level{n}": 0 for n in range(1, 6)}
        assert stats["recent"] == []
        assert stats["weekly"] == []

    @pytest.mark.asyncio()
    async def test_stats(self, store: AssessmentStore, database: Database) -> None:
        """Averages, level distribution, recent leads and the weekly trend."""
        await store.insert(_record(1.0, LeadInfo(name="A")))
        await store.insert(_record(3.0, LeadInfo(name="B")))
        old = _record(5.0, LeadInfo(name="C"))
        await store.insert(old)
        await _backdate(database, old.id, datetime(2024, 1, 3, tzinfo=timezone.utc))

        stats = await store.get_stats()

        assert stats["total"] == 3
        assert stats["avgScores"]["overall"] == 3.0
        assert stats["distribution"] == {
            "level1": 1,
            "level2": 0,
            "level3": 1,
            "level4": 0,
            "level5": 1,
        }
        assert len(stats["recent"]) == 3
        assert stats["recent"][-1]["lead_name"] == "C"
        assert stats["weekly"][-1] == {"week": "2024-W01", "count": 1, "avg_overall": 5.0}
        assert sum(week["count"] for week in stats["weekly"]) == 3

    @pytest.mark.asyncio()
    async def test_export_rows(self, store: AssessmentStore) -> None:
        """Export rows carry the lead and score columns but not the answers."""
        await store.insert(_record(2.0, LeadInfo(email="x@example.com")))
        rows = await store.get_all_for_export()
        assert len(rows) == 1
        assert rows[0]["lead_email"] == "x@example.com"
        assert rows[0]["score_overall"] == 2.0
        assert "answers" not in rows[0]


# ---------------------------------------------------------------------------
# Analytics events
# ---------------------------------------------------------------------------


class TestAnalyticsEvents:
    """Event log writes and per-type counts."""

    @pytest.mark.asyncio()
    async def test_event_counts(self, store: AssessmentStore) -> None:
        await store.track_event("share_clicked", "some-id", {"channel": "linkedin"})
        await store.track_event("share_clicked")
        await store.track_event("pdf_downloaded", None, None)

        assert await store.get_event_stats() == [
            {"event_type": "pdf_downloaded", "count": 1},
            {"event_type": "share_clicked", "count": 2},
        ]

    @pytest.mark.asyncio()
    async def test_events_do_not_require_a_real_assessment(self, store: AssessmentStore) -> None:
        """assessment_id is advisory and not checked."""
        await store.track_event("assessment_completed", "unknown-id")
        assert await store.get_event_stats() == [{"event_type": "assessment_completed", "count": 1}]
