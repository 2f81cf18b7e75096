"""Tests for the Summary Composer."""

import re
from datetime import datetime

from app.analytics.summary import (
    build_chart_datasets,
    build_human_summary,
    pick_strongest_weakest,
)
from app.analytics.types import (
    CategoryStat,
    DataQualityReport,
    EvaluationRecord,
    QuestionStat,
    ScoredEvaluation,
    Term,
    Topline,
    TrendBucket,
)

_SENTENCE_END = re.compile(r"\.(?=\s|$)")


def _sentences(text: str) -> int:
    return len(_SENTENCE_END.findall(text))


def _category(category_id: int, name: str, avg: float | None, responses: int) -> CategoryStat:
    return CategoryStat(
        category_id=category_id,
        name=name,
        avg_score=avg,
        responses=responses,
        stddev=None,
        performance_label="",
        low_sample=responses < 5,
    )


def _scored(count: int, responses_count: int = 2) -> list[ScoredEvaluation]:
    return [
        ScoredEvaluation(
            evaluation=EvaluationRecord(
                evaluation_id=i,
                evaluator_id=1,
                evaluatee_id=1,
                date_submitted=datetime(2024, 1, 1),
                overall_score=4.0,
            ),
            eval_score=4.0,
            responses_count=responses_count,
        )
        for i in range(count)
    ]


def _topline(count: int = 10, moe: float | None = 0.12) -> Topline:
    return Topline(
        evaluations_count=count,
        overall_average=4.1,
        median=4.0,
        min=3.0,
        max=5.0,
        stddev=0.3,
        moe_95=moe,
        performance_label="Good",
    )


class TestPickStrongestWeakest:
    def test_low_sample_categories_excluded(self):
        categories = [
            _category(1, "Teaching", 4.8, 10),
            _category(2, "Grading", 2.0, 3),
            _category(3, "Communication", 3.6, 6),
        ]
        strongest, weakest = pick_strongest_weakest(categories, min_responses=5)
        assert strongest.name == "Teaching"
        assert weakest.name == "Communication"

    def test_ties_break_by_category_id(self):
        categories = [_category(2, "B", 4.0, 9), _category(1, "A", 4.0, 9)]
        strongest, weakest = pick_strongest_weakest(categories, min_responses=5)
        assert strongest.category_id == 1
        assert weakest.category_id == 1

    def test_none_qualify(self):
        assert pick_strongest_weakest([_category(1, "A", 4.0, 2)], min_responses=5) == (None, None)


class TestHumanSummary:
    def test_full_summary(self):
        trend = [
            TrendBucket(year=2024, term=Term.SPRING, avg_score=3.9, evaluations=5),
            TrendBucket(year=2024, term=Term.FALL, avg_score=4.3, evaluations=5),
        ]
        categories = [_category(1, "Teaching", 4.6, 12), _category(2, "Grading", 3.4, 12)]
        summary = build_human_summary(_scored(10), _topline(), categories, trend, DataQualityReport(), 5)

        assert summary.startswith("Overall average is 4.10 across 10 evaluations")
        assert "The latest term average (Fall 2024) is 4.30, up 0.40 points from Spring 2024." in summary
        assert "The strongest category is Teaching (4.60) and the weakest is Grading (3.40)." in summary
        assert "Focus on strengthening Grading" in summary
        assert "The 95% margin of error is ±0.12 (min_responses=5)." in summary
        assert 4 <= _sentences(summary) <= 6

    def test_downward_trend(self):
        trend = [
            TrendBucket(year=2023, term=Term.FALL, avg_score=4.5, evaluations=5),
            TrendBucket(year=2024, term=Term.SPRING, avg_score=4.0, evaluations=5),
        ]
        summary = build_human_summary(_scored(10), _topline(), [], trend, DataQualityReport(), 5)
        assert "down 0.50 points from Fall 2023" in summary

    def test_single_term_has_no_trend_sentence(self):
        trend = [TrendBucket(year=2024, term=Term.FALL, avg_score=4.3, evaluations=10)]
        summary = build_human_summary(_scored(10), _topline(), [], trend, DataQualityReport(), 5)
        assert "latest term" not in summary
        assert 4 <= _sentences(summary) <= 6

    def test_no_qualifying_category(self):
        categories = [_category(1, "Teaching", 4.6, 2)]
        quality = DataQualityReport(low_sample_categories=[1])
        summary = build_human_summary(_scored(10), _topline(), categories, [], quality, 5)
        assert "No category has at least 5 responses yet" in summary
        assert "Collect more responses" in summary
        assert "Sample sizes are limited in some areas (min_responses=5)" in summary

    def test_caveat_when_few_evaluations(self):
        summary = build_human_summary(_scored(2), _topline(count=2), [], [], DataQualityReport(), 5)
        assert "Sample sizes are limited" in summary

    def test_fallback_note_only_when_every_evaluation_lacks_responses(self):
        no_responses = build_human_summary(
            _scored(3, responses_count=0), _topline(count=3), [], [], DataQualityReport(), 5
        )
        assert "fall back to the stored evaluation overall_score" in no_responses
        assert 4 <= _sentences(no_responses) <= 6

        mixed = _scored(2, responses_count=0) + _scored(1, responses_count=2)
        assert "fall back" not in build_human_summary(mixed, _topline(count=3), [], [], DataQualityReport(), 5)

    def test_zero_evaluations(self):
        summary = build_human_summary([], Topline(), [], [], DataQualityReport(), 5)
        assert "Overall average is N/A across 0 evaluations" in summary
        assert "margin of error is N/A" in summary
        assert "fall back" not in summary
        assert 4 <= _sentences(summary) <= 6


class TestChartDatasets:
    def test_shape(self):
        categories = [_category(1, "Teaching", 4.6, 12)]
        trend = [TrendBucket(year=2024, term=Term.SUMMER, avg_score=4.1, evaluations=3)]
        question = QuestionStat(
            question_id=3,
            text="Clear",
            avg_rating=4.0,
            stddev=None,
            responses=1,
            pct_below_3=0.0,
            pct_ge_4_5=0.0,
        )
        charts = build_chart_datasets(categories, trend, [question])
        assert charts["category_bar"] == [{"label": "Teaching", "value": 4.6}]
        assert charts["trend_line"] == [{"label": "Summer 2024", "value": 4.1}]
        assert charts["detailed_table"][0]["question_id"] == "3"
        assert charts["detailed_table"][0]["avg_rating"] == 4.0
