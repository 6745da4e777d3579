"""RevOps maturity scoring algorithm.

Answers arrive as a flat mapping of ``<dimension>_<questionIndex>`` keys to
numeric ratings on a 1-5 scale, three questions per dimension. Each dimension
score is the plain mean of its answered questions; the overall score is the
mean of the six dimension scores. All scores carry one decimal.

Pure functions only; nothing here touches storage.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from revops_maturity.observability import get_logger

logger = get_logger(__name__)

DIMENSION_IDS: tuple[str, ...] = (
    "strategy",
    "process",
    "data",
    "tech",
    "people",
    "journey",
)

QUESTIONS_PER_DIMENSION: int = 3

# Score assigned to a dimension the respondent skipped entirely
DEFAULT_DIMENSION_SCORE: float = 1.0


@dataclass(frozen=True)
class MaturityBand:
    """A named, inclusive range over the 1.0-5.0 overall score domain.

    Attributes:
        min: Lowest score in the band (inclusive).
        max: Highest score in the band (inclusive).
        name: Display label for the band.
    """

    min: float
    max: float
    name: str

    def contains(self, score: float) -> bool:
        """Return True if the score lies within this band."""
        return self.min <= score <= self.max

    def to_dict(self) -> dict[str, object]:
        """Serialise to the wire representation."""
        return {"min": self.min, "max": self.max, "name": self.name}


# Ordered ascending; the first band is the fallback.
MATURITY_BANDS: tuple[MaturityBand, ...] = (
    MaturityBand(min=1.0, max=1.4, name="Ad Hoc"),
    MaturityBand(min=1.5, max=2.4, name="Reactive"),
    MaturityBand(min=2.5, max=3.4, name="Defined"),
    MaturityBand(min=3.5, max=4.4, name="Managed"),
    MaturityBand(min=4.5, max=5.0, name="Optimized"),
)


@dataclass(frozen=True)
class DimensionScores:
    """Scores for one assessment: six dimensions plus the overall mean."""

    strategy: float
    process: float
    data: float
    tech: float
    people: float
    journey: float
    overall: float

    def dimension_items(self) -> list[tuple[str, float]]:
        """Return ``(dimension, score)`` pairs in canonical dimension order."""
        return [(dimension, getattr(self, dimension)) for dimension in DIMENSION_IDS]

    def to_dict(self) -> dict[str, float]:
        """Serialise to a plain dict including ``overall``."""
        scores = dict(self.dimension_items())
        scores["overall"] = self.overall
        return scores


def round_half_up(value: float, digits: int = 1) -> float:
    """Round using the half-up rule rather than Python's banker's rounding.

    The value goes through its shortest ``repr`` so that ``1.45`` rounds to
    ``1.5`` instead of being dragged down by its binary representation.

    Args:
        value: Number to round.
        digits: Number of decimal places to keep.

    Returns:
        The rounded value as a float.
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def score_dimension(answers: Mapping[str, float], dimension: str) -> float:
    """Average the answered questions of one dimension.

    Missing question indices are left out of the average rather than
    counted as zero.

    Args:
        answers: Mapping of ``<dimension>_<index>`` keys to ratings.
        dimension: Dimension id to score.

    Returns:
        The mean rating rounded half-up to one decimal, or
        ``DEFAULT_DIMENSION_SCORE`` when no question was answered.
    """
    ratings = [
        float(answers[key])
        for key in (f"{dimension}_{index}" for index in range(QUESTIONS_PER_DIMENSION))
        if answers.get(key) is not None
    ]
    if not ratings:
        return DEFAULT_DIMENSION_SCORE
    return round_half_up(sum(ratings) / len(ratings))


def calculate_scores(answers: Mapping[str, float]) -> DimensionScores:
    """Score a full answer set.

    Args:
        answers: Mapping of ``<dimension>_<index>`` keys to ratings. Keys
            that do not belong to a known dimension are ignored.

    Returns:
        DimensionScores with each dimension and the overall mean.
    """
    dimension_scores = {
        dimension: score_dimension(answers, dimension) for dimension in DIMENSION_IDS
    }
    overall = round_half_up(sum(dimension_scores.values()) / len(dimension_scores))

    logger.debug(
        "Scores calculated",
        answer_count=len(answers),
        overall_score=overall,
    )
    return DimensionScores(**dimension_scores, overall=overall)


def get_maturity_level(
    score: float,
    bands: tuple[MaturityBand, ...] = MATURITY_BANDS,
) -> MaturityBand:
    """Map an overall score to its maturity band.

    The score is first rounded to one decimal so that values falling in the
    gaps between band edges (e.g. 1.45) land in the band they round into.

    Args:
        score: Overall score in the 1.0-5.0 domain.
        bands: Ordered band table. Defaults to ``MATURITY_BANDS``.

    Returns:
        The first band containing the rounded score, or the first band if
        none does.
    """
    rounded = round_half_up(score)
    for band in bands:
        if band.contains(rounded):
            return band
    return bands[0]
