"""Analytics Pipeline: orchestrator for the 7-step evaluation analytics engine.

Chains the stages in order:
  1. Filter & Dedup
  2. Score Computation
  3. Aggregation  ┐
  4. Trend        ├ independent of each other
  5. Comments     ┘
  6. Data Quality Auditor
  7. Summary Composer

``run_analytics`` is pure and synchronous. ``analyze_professor`` and
``get_professor_analytics`` add the async fetch calls against an
AnalyticsDataSource; those fetches are the only suspension points.
"""

from __future__ import annotations

import dataclasses
import logging
import time

from app.analytics.aggregation import aggregate
from app.analytics.comments import COMMENT_LIMIT, analyze_comments
from app.analytics.filters import DEFAULT_MIN_RESPONSES, filter_and_dedup, parse_filters
from app.analytics.lexicon import DEFAULT_LEXICON, CommentLexicon
from app.analytics.quality import audit_data_quality
from app.analytics.scoring import score_evaluations
from app.analytics.source import AnalyticsDataSource
from app.analytics.summary import compose_summary
from app.analytics.trend import compute_trend
from app.analytics.types import (
    AnalyticsFailure,
    AnalyticsFilters,
    AnalyticsResult,
    EvaluationRecord,
    InputNotFound,
    InvalidFilter,
    ProfessorProfile,
    ResponseRecord,
)
from app.core.metrics import observe_analytics_run

logger = logging.getLogger(__name__)


def run_analytics(
    profile: ProfessorProfile,
    evaluations: list[EvaluationRecord],
    responses: list[ResponseRecord],
    filters: AnalyticsFilters,
    lexicon: CommentLexicon = DEFAULT_LEXICON,
    comment_limit: int = COMMENT_LIMIT,
) -> AnalyticsResult:
    """Run every stage over an in-memory snapshot.

    Args:
        profile: The evaluatee's profile.
        evaluations: Raw evaluation rows; filters are re-applied here so a
                     broader snapshot is fine.
        responses: Response rows for (at least) those evaluations.
        filters: Validated filters, including min_responses.

    Returns:
        AnalyticsResult; zero evaluations produce all-null statistics.
    """
    # Step 1: Filter & Dedup
    selected, deduped, duplicates = filter_and_dedup(evaluations, filters)
    kept_ids = {ev.evaluation_id for ev in deduped}
    responses = [r for r in responses if r.evaluation_id in kept_ids]
    profile = dataclasses.replace(
        profile,
        course_ids=sorted({ev.course_id for ev in selected if ev.course_id is not None}),
    )

    # Step 2: Score Computation
    scored = score_evaluations(deduped, responses)

    # Steps 3-5
    topline, categories, questions, top, bottom = aggregate(scored, responses, filters.min_responses)
    trend = compute_trend(scored)
    comments = analyze_comments(deduped, lexicon, comment_limit)

    # Step 6: Data Quality Auditor
    quality = audit_data_quality(scored, duplicates, responses, categories, questions, filters.min_responses)

    # Step 7: Summary Composer
    return compose_summary(
        profile=profile,
        scored=scored,
        topline=topline,
        categories=categories,
        questions=questions,
        top=top,
        bottom=bottom,
        trend=trend,
        comments=comments,
        quality=quality,
        min_responses=filters.min_responses,
    )


async def analyze_professor(
    source: AnalyticsDataSource,
    filters: AnalyticsFilters,
    lexicon: CommentLexicon = DEFAULT_LEXICON,
    comment_limit: int = COMMENT_LIMIT,
) -> AnalyticsResult | InputNotFound:
    """Fetch the evaluatee's snapshot from ``source`` and run the pipeline."""
    profile = await source.fetch_professor_profile(filters.evaluatee_id)
    if profile is None:
        logger.info(
            "Analytics: professor %s not found",
            filters.evaluatee_id,
            extra={"evaluatee_id": filters.evaluatee_id, "outcome": "input_not_found"},
        )
        return InputNotFound(evaluatee_id=filters.evaluatee_id)

    evaluations = await source.fetch_evaluations(
        filters.evaluatee_id,
        start_date=filters.start_date,
        end_date=filters.end_date,
        course_ids=filters.course_ids,
        evaluator_type=filters.evaluator_type,
    )
    evaluation_ids = sorted({ev.evaluation_id for ev in evaluations})
    responses = await source.fetch_responses(evaluation_ids) if evaluation_ids else []

    result = run_analytics(profile, evaluations, responses, filters, lexicon, comment_limit)

    topline = result.json_output["topline"]
    logger.info(
        "Analytics complete: professor=%s, evaluations=%d, responses=%d, avg=%s, label=%s",
        filters.evaluatee_id,
        topline["evaluations_count"],
        len(responses),
        topline["overall_average"],
        topline["performance_label"],
        extra={"evaluatee_id": filters.evaluatee_id, "outcome": "success"},
    )
    return result


async def get_professor_analytics(
    source: AnalyticsDataSource,
    evaluatee_id,
    start_date=None,
    end_date=None,
    course_ids=None,
    evaluator_type=None,
    min_responses=DEFAULT_MIN_RESPONSES,
    lexicon: CommentLexicon = DEFAULT_LEXICON,
    comment_limit: int = COMMENT_LIMIT,
) -> AnalyticsResult | AnalyticsFailure:
    """Engine entry point for raw (string or typed) caller input.

    Returns an AnalyticsResult or exactly one tagged failure
    (InvalidFilter / InputNotFound); never raises for bad input.
    """
    start = time.perf_counter()

    filters = parse_filters(
        evaluatee_id,
        start_date=start_date,
        end_date=end_date,
        course_ids=course_ids,
        evaluator_type=evaluator_type,
        min_responses=min_responses,
    )
    if isinstance(filters, InvalidFilter):
        result: AnalyticsResult | AnalyticsFailure = filters
    else:
        result = await analyze_professor(source, filters, lexicon, comment_limit)

    elapsed = time.perf_counter() - start
    if isinstance(result, AnalyticsResult):
        observe_analytics_run("success", elapsed, result.json_output["topline"]["evaluations_count"])
    else:
        observe_analytics_run(result.kind, elapsed)
    return result
