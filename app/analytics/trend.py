"""Trend Analyzer: Pipeline Step 4.

Buckets scored evaluations into academic terms by submission month
(1–5 Spring, 6–8 Summer, 9–12 Fall) and averages each bucket.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime

from app.analytics.aggregation import mean
from app.analytics.types import ScoredEvaluation, Term, TrendBucket

logger = logging.getLogger(__name__)


def term_for_month(month: int) -> Term:
    if 1 <= month <= 5:
        return Term.SPRING
    if 6 <= month <= 8:
        return Term.SUMMER
    return Term.FALL


def term_label(moment: datetime) -> str:
    """e.g. ``"Spring 2024"``."""
    return f"{term_for_month(moment.month).value} {moment.year}"


def compute_trend(scored: list[ScoredEvaluation]) -> list[TrendBucket]:
    """Per-term averages sorted chronologically (year, then Spring < Summer < Fall)."""
    buckets: dict[tuple[int, Term], list[ScoredEvaluation]] = defaultdict(list)
    for item in scored:
        moment = item.evaluation.date_submitted
        buckets[(moment.year, term_for_month(moment.month))].append(item)

    trend = [
        TrendBucket(
            year=year,
            term=term,
            avg_score=mean([s.eval_score for s in items if s.eval_score is not None]),
            evaluations=len(items),
        )
        for (year, term), items in buckets.items()
    ]
    trend.sort(key=lambda b: (b.year, b.term.order))

    logger.debug("Trend: %s", [b.label for b in trend])
    return trend
