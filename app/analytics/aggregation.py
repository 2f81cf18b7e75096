"""Aggregation Engine: Pipeline Step 3.

Computes:
  - Topline: count, mean, sample stddev, min, max, median and the 95% margin
    of error  MOE = 1.96 × stddev / sqrt(count)
  - Category breakdown: weighted average rating per category
  - Question statistics and top/bottom question ranking
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict

import numpy as np

from app.analytics.scoring import weighted_average
from app.analytics.types import (
    CategoryStat,
    QuestionStat,
    ResponseRecord,
    ScoredEvaluation,
    Topline,
)

logger = logging.getLogger(__name__)

Z_95 = 1.96
RANKING_SIZE = 5

# (threshold, label), checked top-down
PERFORMANCE_LABELS: list[tuple[float, str]] = [
    (4.5, "Excellent"),
    (4.0, "Good"),
    (3.5, "Satisfactory"),
]


def performance_label(avg: float | None) -> str:
    if avg is None:
        return "N/A"
    for threshold, label in PERFORMANCE_LABELS:
        if avg >= threshold:
            return label
    return "Needs Improvement"


# ---------------------------------------------------------------------------
# Basic statistics
# ---------------------------------------------------------------------------


def mean(values: list[float]) -> float | None:
    if not values:
        return None
    return math.fsum(values) / len(values)


def sample_stddev(values: list[float]) -> float | None:
    """Sample standard deviation (n-1); undefined below two values."""
    if len(values) < 2:
        return None
    return float(np.std(np.sort(np.asarray(values, dtype=float)), ddof=1))


def median(values: list[float]) -> float | None:
    """50th percentile with linear interpolation between closest ranks."""
    if not values:
        return None
    return float(np.percentile(np.asarray(values, dtype=float), 50))


def margin_of_error(stddev: float | None, count: int) -> float | None:
    if stddev is None or count <= 0:
        return None
    return Z_95 * stddev / math.sqrt(count)


# ---------------------------------------------------------------------------
# Topline
# ---------------------------------------------------------------------------


def compute_topline(scored: list[ScoredEvaluation]) -> Topline:
    """Topline over eval_scores; evaluations with no score at all are counted but not averaged."""
    scores = [s.eval_score for s in scored if s.eval_score is not None]
    count = len(scored)

    avg = mean(scores)
    stddev = sample_stddev(scores)
    return Topline(
        evaluations_count=count,
        overall_average=avg,
        median=median(scores),
        min=min(scores) if scores else None,
        max=max(scores) if scores else None,
        stddev=stddev,
        moe_95=margin_of_error(stddev, count),
        performance_label=performance_label(avg),
    )


# ---------------------------------------------------------------------------
# Category breakdown
# ---------------------------------------------------------------------------


def compute_category_breakdown(
    responses: list[ResponseRecord],
    min_responses: int,
) -> list[CategoryStat]:
    """One row per category with at least one answered question, ordered by category_id."""
    by_category: dict[int, list[ResponseRecord]] = defaultdict(list)
    names: dict[int, str] = {}
    for resp in responses:
        category = resp.question.category
        if category is None:
            continue
        by_category[category.category_id].append(resp)
        names.setdefault(category.category_id, category.name)

    breakdown = []
    for category_id in sorted(by_category):
        rows = by_category[category_id]
        avg = weighted_average(rows)
        breakdown.append(
            CategoryStat(
                category_id=category_id,
                name=names[category_id],
                avg_score=avg,
                responses=len(rows),
                stddev=sample_stddev([r.rating for r in rows]),
                performance_label=performance_label(avg),
                low_sample=len(rows) < min_responses,
            )
        )
    return breakdown


# ---------------------------------------------------------------------------
# Question statistics
# ---------------------------------------------------------------------------


def _percentage(hits: int, total: int) -> float | None:
    if total == 0:
        return None
    return 100.0 * hits / total


def compute_question_stats(responses: list[ResponseRecord]) -> list[QuestionStat]:
    """Unweighted per-question statistics, ordered by question_id."""
    ratings: dict[int, list[float]] = defaultdict(list)
    texts: dict[int, str] = {}
    for resp in responses:
        qid = resp.question.question_id
        ratings[qid].append(resp.rating)
        texts.setdefault(qid, resp.question.text)

    stats = []
    for qid in sorted(ratings):
        values = ratings[qid]
        stats.append(
            QuestionStat(
                question_id=qid,
                text=texts[qid],
                avg_rating=mean(values),
                stddev=sample_stddev(values),
                responses=len(values),
                pct_below_3=_percentage(sum(1 for v in values if v < 3), len(values)),
                pct_ge_4_5=_percentage(sum(1 for v in values if v >= 4.5), len(values)),
            )
        )
    return stats


def rank_questions(
    question_stats: list[QuestionStat],
    limit: int = RANKING_SIZE,
) -> tuple[list[QuestionStat], list[QuestionStat]]:
    """Top and bottom questions by avg_rating.

    Questions without responses (null average) never rank. Ties break by
    ascending question_id in both lists. Low-sample questions still rank.
    """
    rated = [q for q in question_stats if q.avg_rating is not None and q.responses > 0]
    top = sorted(rated, key=lambda q: (-q.avg_rating, q.question_id))[:limit]
    bottom = sorted(rated, key=lambda q: (q.avg_rating, q.question_id))[:limit]
    return top, bottom


def aggregate(
    scored: list[ScoredEvaluation],
    responses: list[ResponseRecord],
    min_responses: int,
) -> tuple[Topline, list[CategoryStat], list[QuestionStat], list[QuestionStat], list[QuestionStat]]:
    """Run the whole stage.

    Returns:
        Tuple of (topline, category_breakdown, question_stats, top, bottom).
    """
    topline = compute_topline(scored)
    categories = compute_category_breakdown(responses, min_responses)
    questions = compute_question_stats(responses)
    top, bottom = rank_questions(questions)

    logger.debug(
        "Aggregation: evaluations=%d, avg=%s, categories=%d, questions=%d",
        topline.evaluations_count,
        topline.overall_average,
        len(categories),
        len(questions),
    )
    return topline, categories, questions, top, bottom
