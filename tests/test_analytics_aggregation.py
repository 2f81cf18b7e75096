"""Tests for the Aggregation Engine."""

import math
import random
from datetime import datetime

import pytest

from app.analytics.aggregation import (
    compute_category_breakdown,
    compute_question_stats,
    compute_topline,
    median,
    performance_label,
    rank_questions,
    sample_stddev,
)
from app.analytics.types import (
    Category,
    EvaluationRecord,
    Question,
    QuestionStat,
    ResponseRecord,
    ScoredEvaluation,
)

TEACHING = Category(category_id=1, name="Teaching")
GRADING = Category(category_id=2, name="Grading")


def _scored(*scores: float | None) -> list[ScoredEvaluation]:
    return [
        ScoredEvaluation(
            evaluation=EvaluationRecord(
                evaluation_id=i,
                evaluator_id=1,
                evaluatee_id=1,
                date_submitted=datetime(2024, 1, i + 1),
            ),
            eval_score=score,
            responses_count=1,
        )
        for i, score in enumerate(scores)
    ]


def _question_stat(question_id: int, avg: float | None, responses: int = 3) -> QuestionStat:
    return QuestionStat(
        question_id=question_id,
        text=f"Q{question_id}",
        avg_rating=avg,
        stddev=None,
        responses=responses,
        pct_below_3=None,
        pct_ge_4_5=None,
    )


class TestPerformanceLabel:
    @pytest.mark.parametrize(
        "avg, label",
        [
            (4.5, "Excellent"),
            (4.4999, "Good"),
            (4.0, "Good"),
            (3.9999, "Satisfactory"),
            (3.5, "Satisfactory"),
            (3.4999, "Needs Improvement"),
            (1.0, "Needs Improvement"),
            (None, "N/A"),
        ],
    )
    def test_boundaries(self, avg, label):
        assert performance_label(avg) == label


class TestStatistics:
    def test_stddev_needs_two_values(self):
        assert sample_stddev([]) is None
        assert sample_stddev([4.0]) is None

    def test_sample_stddev(self):
        assert sample_stddev([2.0, 4.0]) == pytest.approx(math.sqrt(2))

    def test_median_interpolates(self):
        assert median([1.0, 2.0, 3.0, 4.0]) == pytest.approx(2.5)
        assert median([]) is None


class TestTopline:
    def test_scenario(self):
        topline = compute_topline(_scored(4.2, 4.8, 3.9))
        assert topline.evaluations_count == 3
        assert topline.overall_average == pytest.approx(4.3)
        assert topline.median == pytest.approx(4.2)
        assert topline.min == pytest.approx(3.9)
        assert topline.max == pytest.approx(4.8)
        assert topline.stddev == pytest.approx(math.sqrt(0.21))
        assert topline.moe_95 == pytest.approx(1.96 * math.sqrt(0.21) / math.sqrt(3))
        assert topline.performance_label == "Good"

    def test_single_evaluation_has_no_spread(self):
        topline = compute_topline(_scored(4.0))
        assert topline.overall_average == 4.0
        assert topline.stddev is None
        assert topline.moe_95 is None

    def test_zero_evaluations(self):
        topline = compute_topline([])
        assert topline.evaluations_count == 0
        for value in (
            topline.overall_average,
            topline.median,
            topline.min,
            topline.max,
            topline.stddev,
            topline.moe_95,
        ):
            assert value is None
        assert topline.performance_label == "N/A"

    def test_unscored_evaluations_counted_not_averaged(self):
        topline = compute_topline(_scored(4.0, None))
        assert topline.evaluations_count == 2
        assert topline.overall_average == 4.0

    def test_to_dict_uses_moe_key(self):
        assert "95_moe" in compute_topline(_scored(4.0, 5.0)).to_dict()


class TestCategoryBreakdown:
    def _responses(self) -> list[ResponseRecord]:
        heavy = Question(question_id=1, text="Heavy", category=TEACHING, weight=3)
        light = Question(question_id=2, text="Light", category=TEACHING, weight=0)
        grading = Question(question_id=3, text="Fair", category=GRADING, weight=1.5)
        return [
            ResponseRecord(evaluation_id=1, question=heavy, rating=5),
            ResponseRecord(evaluation_id=1, question=light, rating=2),
            ResponseRecord(evaluation_id=2, question=heavy, rating=4.3),
            ResponseRecord(evaluation_id=2, question=light, rating=3.7),
            ResponseRecord(evaluation_id=2, question=grading, rating=3.1),
            ResponseRecord(evaluation_id=3, question=grading, rating=4.9),
            ResponseRecord(evaluation_id=3, question=heavy, rating=1.1),
        ]

    def test_weighted_average_per_category(self):
        breakdown = compute_category_breakdown(self._responses(), min_responses=5)
        assert [c.category_id for c in breakdown] == [1, 2]

        teaching, grading = breakdown
        expected = (5 * 3 + 2 * 1 + 4.3 * 3 + 3.7 * 1 + 1.1 * 3) / (3 + 1 + 3 + 1 + 3)
        assert teaching.avg_score == pytest.approx(expected)
        assert teaching.responses == 5
        assert teaching.low_sample is False
        assert grading.avg_score == pytest.approx(4.0)
        assert grading.responses == 2
        assert grading.low_sample is True
        assert grading.performance_label == "Good"

    def test_invariant_under_reordering(self):
        responses = self._responses()
        baseline = compute_category_breakdown(responses, min_responses=5)

        reversed_rows = compute_category_breakdown(list(reversed(responses)), min_responses=5)
        assert reversed_rows == baseline

        rng = random.Random(7)
        for _ in range(10):
            shuffled = responses[:]
            rng.shuffle(shuffled)
            assert compute_category_breakdown(shuffled, min_responses=5) == baseline

    def test_empty(self):
        assert compute_category_breakdown([], min_responses=5) == []


class TestQuestionStats:
    def test_percentages(self):
        question = Question(question_id=1, text="Q", category=TEACHING, weight=1)
        responses = [ResponseRecord(evaluation_id=i, question=question, rating=r) for i, r in enumerate([1, 2, 4, 5])]
        (stat,) = compute_question_stats(responses)
        assert stat.avg_rating == 3.0
        assert stat.responses == 4
        assert stat.pct_below_3 == 50.0
        assert stat.pct_ge_4_5 == 25.0
        assert stat.stddev == pytest.approx(math.sqrt(10 / 3))

    def test_ordered_by_question_id(self):
        q5 = Question(question_id=5, text="Five", category=TEACHING)
        q2 = Question(question_id=2, text="Two", category=TEACHING)
        responses = [
            ResponseRecord(evaluation_id=1, question=q5, rating=3),
            ResponseRecord(evaluation_id=1, question=q2, rating=4),
        ]
        assert [s.question_id for s in compute_question_stats(responses)] == [2, 5]


class TestRankQuestions:
    def test_ties_break_by_question_id(self):
        stats = [_question_stat(3, 4.0), _question_stat(1, 4.0), _question_stat(2, 3.0)]
        top, bottom = rank_questions(stats)
        assert [q.question_id for q in top] == [1, 3, 2]
        assert [q.question_id for q in bottom] == [2, 1, 3]

    def test_unanswered_questions_never_rank(self):
        stats = [_question_stat(1, None, responses=0), _question_stat(2, 1.0), _question_stat(3, 5.0)]
        top, bottom = rank_questions(stats)
        assert 1 not in [q.question_id for q in top]
        assert 1 not in [q.question_id for q in bottom]
        assert bottom[0].question_id == 2

    def test_limited_to_five(self):
        stats = [_question_stat(i, float(i % 5) + 0.5) for i in range(1, 12)]
        top, bottom = rank_questions(stats)
        assert len(top) == 5
        assert len(bottom) == 5
        assert top[0].avg_rating == 4.5
        assert bottom[0].avg_rating == 0.5

    def test_low_sample_questions_still_rank(self):
        top, _ = rank_questions([_question_stat(1, 5.0, responses=1), _question_stat(2, 3.0)])
        assert top[0].question_id == 1
