"""Summary Composer: Pipeline Step 7.

Builds the three output artifacts:
  - human_summary: 4–6 sentence narrative
  - json_output: full structured result
  - chart_datasets: bar / line / table data for the UI
"""

from __future__ import annotations

import logging

from app.analytics.types import (
    AnalyticsResult,
    CategoryStat,
    CommentInsight,
    DataQualityReport,
    ProfessorProfile,
    QuestionStat,
    ScoredEvaluation,
    Topline,
    TrendBucket,
)

logger = logging.getLogger(__name__)


def _fmt(value: float | None) -> str:
    return f"{value:.2f}" if value is not None else "N/A"


# ---------------------------------------------------------------------------
# Narrative sentences
# ---------------------------------------------------------------------------


def _overall_sentence(topline: Topline) -> str:
    return (
        f"Overall average is {_fmt(topline.overall_average)} across {topline.evaluations_count} evaluations "
        f"(min={_fmt(topline.min)}, max={_fmt(topline.max)}, median={_fmt(topline.median)})."
    )


def _trend_sentence(trend: list[TrendBucket]) -> str:
    if len(trend) < 2:
        return ""
    prev, last = trend[-2], trend[-1]
    if prev.avg_score is None or last.avg_score is None:
        return ""
    diff = last.avg_score - prev.avg_score
    direction = "up" if diff >= 0 else "down"
    return (
        f"The latest term average ({last.label}) is {last.avg_score:.2f}, "
        f"{direction} {abs(diff):.2f} points from {prev.label}."
    )


def qualifying_categories(categories: list[CategoryStat], min_responses: int) -> list[CategoryStat]:
    """Categories with enough responses to be named in the narrative."""
    return [c for c in categories if c.responses >= min_responses and c.avg_score is not None]


def pick_strongest_weakest(
    categories: list[CategoryStat],
    min_responses: int,
) -> tuple[CategoryStat | None, CategoryStat | None]:
    eligible = qualifying_categories(categories, min_responses)
    if not eligible:
        return None, None
    strongest = min(eligible, key=lambda c: (-c.avg_score, c.category_id))
    weakest = min(eligible, key=lambda c: (c.avg_score, c.category_id))
    return strongest, weakest


def _category_sentence(strongest: CategoryStat | None, weakest: CategoryStat | None, min_responses: int) -> str:
    if strongest is None or weakest is None:
        return (
            f"No category has at least {min_responses} responses yet, "
            f"so strongest and weakest categories are not identified."
        )
    return (
        f"The strongest category is {strongest.name} ({strongest.avg_score:.2f}) "
        f"and the weakest is {weakest.name} ({weakest.avg_score:.2f})."
    )


def _recommendation_sentence(weakest: CategoryStat | None) -> str:
    if weakest is None:
        return "Collect more responses to improve the precision of these estimates."
    return (
        f"Focus on strengthening {weakest.name} through targeted feedback, "
        f"peer observation, or revised course activities."
    )


def _caveat_sentence(topline: Topline, quality: DataQualityReport, min_responses: int) -> str:
    moe = f"±{topline.moe_95:.2f}" if topline.moe_95 is not None else "N/A"
    if topline.evaluations_count < min_responses or quality.has_low_samples:
        return (
            f"Sample sizes are limited in some areas (min_responses={min_responses}), "
            f"so interpret results with caution; the 95% margin of error is {moe}."
        )
    return f"The 95% margin of error is {moe} (min_responses={min_responses})."


def _fallback_sentence(scored: list[ScoredEvaluation]) -> str:
    if scored and all(s.responses_count == 0 for s in scored):
        return "No response rows were found, so all scores fall back to the stored evaluation overall_score."
    return ""


def build_human_summary(
    scored: list[ScoredEvaluation],
    topline: Topline,
    categories: list[CategoryStat],
    trend: list[TrendBucket],
    quality: DataQualityReport,
    min_responses: int,
) -> str:
    strongest, weakest = pick_strongest_weakest(categories, min_responses)
    sentences = [
        _overall_sentence(topline),
        _trend_sentence(trend),
        _category_sentence(strongest, weakest, min_responses),
        _recommendation_sentence(weakest),
        _caveat_sentence(topline, quality, min_responses),
        _fallback_sentence(scored),
    ]
    return " ".join(s for s in sentences if s)


# ---------------------------------------------------------------------------
# Structured outputs
# ---------------------------------------------------------------------------


def build_chart_datasets(
    categories: list[CategoryStat],
    trend: list[TrendBucket],
    questions: list[QuestionStat],
) -> dict:
    return {
        "category_bar": [{"label": c.name, "value": c.avg_score} for c in categories],
        "trend_line": [{"label": b.label, "value": b.avg_score} for b in trend],
        "detailed_table": [q.to_dict() for q in questions],
    }


def build_json_output(
    profile: ProfessorProfile,
    topline: Topline,
    categories: list[CategoryStat],
    questions: list[QuestionStat],
    trend: list[TrendBucket],
    top: list[QuestionStat],
    bottom: list[QuestionStat],
    comments: list[CommentInsight],
    quality: DataQualityReport,
) -> dict:
    return {
        "professor": profile.to_dict(),
        "topline": topline.to_dict(),
        "category_breakdown": [c.to_dict() for c in categories],
        "question_stats": [q.to_dict() for q in questions],
        "trend": [b.to_dict() for b in trend],
        "top_questions": [q.to_dict() for q in top],
        "bottom_questions": [q.to_dict() for q in bottom],
        "comments": [c.to_dict() for c in comments],
        "data_quality": quality.to_dict(),
    }


def compose_summary(
    profile: ProfessorProfile,
    scored: list[ScoredEvaluation],
    topline: Topline,
    categories: list[CategoryStat],
    questions: list[QuestionStat],
    top: list[QuestionStat],
    bottom: list[QuestionStat],
    trend: list[TrendBucket],
    comments: list[CommentInsight],
    quality: DataQualityReport,
    min_responses: int,
) -> AnalyticsResult:
    summary = build_human_summary(scored, topline, categories, trend, quality, min_responses)
    logger.debug("Summary for professor %s: %s", profile.user_id, summary)
    return AnalyticsResult(
        human_summary=summary,
        json_output=build_json_output(profile, topline, categories, questions, trend, top, bottom, comments, quality),
        chart_datasets=build_chart_datasets(categories, trend, questions),
    )
