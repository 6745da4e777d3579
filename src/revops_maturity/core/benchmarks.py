"""Cross-respondent benchmark computation.

Every call recomputes from a full scan of stored scores; data volumes are
lead-capture scale, so no caching is done.

Percentile ranks use the midpoint method::

    percentile = round(100 * (count_below + 0.5 * count_equal) / total)

so a score tied with much of the sample lands in the middle of the ties
rather than at their top or bottom.
"""

from typing import Any, Sequence

from revops_maturity.core.interfaces import IAssessmentStore
from revops_maturity.core.scoring import DIMENSION_IDS, DimensionScores, round_half_up
from revops_maturity.observability import get_logger

logger = get_logger(__name__)

MIN_RESPONSES: int = 10

_SCORE_KEYS: tuple[str, ...] = (*DIMENSION_IDS, "overall")


def calculate_percentile(value: float, values: Sequence[float]) -> int:
    """Percentile rank of ``value`` within ``values`` (midpoint tie method).

    Args:
        value: The score to rank.
        values: Historical sample.

    Returns:
        Integer percentile 0-100; 50 for an empty sample.
    """
    if not values:
        return 50
    below = sum(1 for v in values if v < value)
    equal = sum(1 for v in values if v == value)
    return int(round_half_up(100 * (below + 0.5 * equal) / len(values), 0))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean rounded half-up to one decimal; 0 for an empty sample."""
    if not values:
        return 0.0
    return round_half_up(sum(values) / len(values))


def median(values: Sequence[float]) -> float:
    """Middle element of the ascending sort, taking the lower middle for even sizes.

    No interpolation is done between the two central elements.

    Raises:
        ValueError: If ``values`` is empty.
    """
    if not values:
        raise ValueError("median() of an empty sample")
    ordered = sorted(values)
    return ordered[(len(ordered) - 1) // 2]


def distribution(values: Sequence[float]) -> list[int]:
    """Count values per maturity band: <1.5, <2.5, <3.5, <4.5, >=4.5."""
    return [
        sum(1 for v in values if v < 1.5),
        sum(1 for v in values if 1.5 <= v < 2.5),
        sum(1 for v in values if 2.5 <= v < 3.5),
        sum(1 for v in values if 3.5 <= v < 4.5),
        sum(1 for v in values if v >= 4.5),
    ]


def _column(rows: Sequence[DimensionScores], key: str) -> list[float]:
    return [getattr(row, key) for row in rows]


class BenchmarkEngine:
    """Compares one respondent against every stored assessment.

    Args:
        store: Assessment store providing ``get_all_scores``.
        min_responses: Minimum sample size before percentiles are reported.
    """

    def __init__(self, store: IAssessmentStore, min_responses: int = MIN_RESPONSES) -> None:
        self._store = store
        self._min_responses = min_responses

    async def get_benchmarks(self, scores: DimensionScores) -> dict[str, Any]:
        """Percentile rank and historical mean for each dimension and overall.

        Args:
            scores: The respondent's scores.

        Returns:
            ``{"available": False, "totalResponses": n, "minRequired": m}`` while
            the sample is below the minimum, otherwise ``{"available": True,
            "totalResponses": n, "benchmarks": {key: {"percentile", "average"}}}``
            keyed by dimension id plus ``overall``.
        """
        rows = await self._store.get_all_scores()
        total = len(rows)

        if total < self._min_responses:
            return {
                "available": False,
                "totalResponses": total,
                "minRequired": self._min_responses,
            }

        benchmarks: dict[str, dict[str, float | int]] = {}
        for key in _SCORE_KEYS:
            values = _column(rows, key)
            benchmarks[key] = {
                "percentile": calculate_percentile(getattr(scores, key), values),
                "average": mean(values),
            }

        logger.debug(
            "Benchmarks computed",
            total_responses=total,
            overall_percentile=benchmarks["overall"]["percentile"],
        )
        return {"available": True, "totalResponses": total, "benchmarks": benchmarks}

    async def get_aggregates(self) -> dict[str, Any] | None:
        """Public aggregate statistics across all stored assessments.

        Returns:
            None when nothing is stored, otherwise ``totalAssessments``, a
            ``dimensions`` mapping and an ``overall`` entry, each with
            ``average``, ``median`` and a 5-bucket ``distribution``.
        """
        rows = await self._store.get_all_scores()
        if not rows:
            return None

        def summarise(values: list[float]) -> dict[str, Any]:
            return {
                "average": mean(values),
                "median": median(values),
                "distribution": distribution(values),
            }

        return {
            "totalAssessments": len(rows),
            "dimensions": {
                dimension: summarise(_column(rows, dimension)) for dimension in DIMENSION_IDS
            },
            "overall": summarise(_column(rows, "overall")),
        }
