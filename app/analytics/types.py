"""Core types and DTOs for the Evaluation Analytics Engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class EvaluatorType(str, Enum):
    """Normalized kind of person who submitted an evaluation."""

    STUDENT = "Student"
    FACULTY = "Faculty"
    SUPERVISOR = "Supervisor"

    @classmethod
    def parse(cls, value: str | None) -> EvaluatorType | None:
        """Case-insensitive lookup; returns None for blank or unknown values."""
        if not value or not value.strip():
            return None
        needle = value.strip().lower()
        for member in cls:
            if member.value.lower() == needle:
                return member
        return None


class Term(str, Enum):
    """Academic-period bucket derived from a submission month."""

    SPRING = "Spring"  # months 1-5
    SUMMER = "Summer"  # months 6-8
    FALL = "Fall"  # months 9-12

    @property
    def order(self) -> int:
        return _TERM_ORDER[self]


_TERM_ORDER = {Term.SPRING: 1, Term.SUMMER: 2, Term.FALL: 3}


class Sentiment(str, Enum):
    """Keyword-rule comment classification."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    CONSTRUCTIVE = "constructive"
    NEUTRAL = "neutral"


# ---------------------------------------------------------------------------
# Input rows, supplied by the data collaborator
# ---------------------------------------------------------------------------


@dataclass
class Category:
    category_id: int
    name: str = ""


@dataclass
class Question:
    question_id: int
    text: str = ""
    category: Category | None = None
    weight: float | None = None  # None / 0 → treated as 1, flagged by the auditor


@dataclass
class EvaluationRecord:
    """One submitted evaluation row (evaluation_id may repeat on bad ingests)."""

    evaluation_id: int
    evaluator_id: int
    evaluatee_id: int
    date_submitted: datetime
    overall_score: float | None = None  # Precomputed, used when no responses
    course_id: int | None = None
    comments: str | None = None
    evaluator_type: EvaluatorType | None = None  # Normalized at the source boundary


@dataclass
class ResponseRecord:
    """A single rating, joined with its question and category."""

    evaluation_id: int
    question: Question
    rating: float


@dataclass
class ProfessorProfile:
    user_id: int
    full_name: str
    department: str | None = None
    course_ids: list[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "user_id": str(self.user_id),
            "full_name": self.full_name,
            "department": self.department,
            "course_ids": list(self.course_ids),
        }


@dataclass
class AnalyticsFilters:
    """Validated caller filters (see filters.parse_filters)."""

    evaluatee_id: int
    start_date: date | None = None
    end_date: date | None = None
    course_ids: list[int] | None = None
    evaluator_type: EvaluatorType | None = None
    min_responses: int = 5


# ---------------------------------------------------------------------------
# Tagged failures, returned, never raised across the engine boundary
# ---------------------------------------------------------------------------


@dataclass
class InputNotFound:
    evaluatee_id: int | str
    kind: str = "input_not_found"

    @property
    def message(self) -> str:
        return f"Professor not found: {self.evaluatee_id}"

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message, "evaluatee_id": str(self.evaluatee_id)}


@dataclass
class InvalidFilter:
    fields: list[str] = field(default_factory=list)
    kind: str = "invalid_filter"

    @property
    def message(self) -> str:
        return "Invalid filter value(s): " + ", ".join(self.fields)

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message, "fields": list(self.fields)}


AnalyticsFailure = InputNotFound | InvalidFilter


# ---------------------------------------------------------------------------
# Stage outputs
# ---------------------------------------------------------------------------


@dataclass
class ScoredEvaluation:
    """Score Computation output for one deduplicated evaluation."""

    evaluation: EvaluationRecord
    eval_score: float | None
    responses_count: int = 0

    @property
    def used_fallback(self) -> bool:
        return self.responses_count == 0


@dataclass
class Topline:
    evaluations_count: int = 0
    overall_average: float | None = None
    median: float | None = None
    min: float | None = None
    max: float | None = None
    stddev: float | None = None
    moe_95: float | None = None
    performance_label: str = "N/A"

    def to_dict(self) -> dict:
        return {
            "evaluations_count": self.evaluations_count,
            "overall_average": self.overall_average,
            "median": self.median,
            "min": self.min,
            "max": self.max,
            "stddev": self.stddev,
            "95_moe": self.moe_95,
            "performance_label": self.performance_label,
        }


@dataclass
class CategoryStat:
    category_id: int
    name: str
    avg_score: float | None
    responses: int
    stddev: float | None
    performance_label: str
    low_sample: bool

    def to_dict(self) -> dict:
        return {
            "category_id": str(self.category_id),
            "name": self.name,
            "avg_score": self.avg_score,
            "responses": self.responses,
            "stddev": self.stddev,
            "performance_label": self.performance_label,
            "low_sample": self.low_sample,
        }


@dataclass
class QuestionStat:
    question_id: int
    text: str
    avg_rating: float | None
    stddev: float | None
    responses: int
    pct_below_3: float | None
    pct_ge_4_5: float | None

    def to_dict(self) -> dict:
        return {
            "question_id": str(self.question_id),
            "text": self.text,
            "avg_rating": self.avg_rating,
            "stddev": self.stddev,
            "responses": self.responses,
            "pct_below_3": self.pct_below_3,
            "pct_ge_4_5": self.pct_ge_4_5,
        }


@dataclass
class TrendBucket:
    year: int
    term: Term
    avg_score: float | None
    evaluations: int

    @property
    def label(self) -> str:
        return f"{self.term.value} {self.year}"

    def to_dict(self) -> dict:
        return {"semester": self.label, "avg_score": self.avg_score, "evaluations": self.evaluations}


@dataclass
class CommentInsight:
    evaluation_id: int
    date_submitted: datetime
    text: str
    sentiment: Sentiment
    keywords: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "evaluation_id": str(self.evaluation_id),
            "date_submitted": self.date_submitted.isoformat(),
            "text": self.text,
            "sentiment": self.sentiment.value,
            "keywords": list(self.keywords),
        }


@dataclass
class DataQualityReport:
    evaluations_with_missing_responses: list[int] = field(default_factory=list)
    duplicated_evaluation_ids: list[int] = field(default_factory=list)
    questions_with_missing_weight: list[int] = field(default_factory=list)
    low_sample_categories: list[int] = field(default_factory=list)
    low_sample_questions: list[int] = field(default_factory=list)

    @property
    def has_low_samples(self) -> bool:
        return bool(self.low_sample_categories or self.low_sample_questions)

    def to_dict(self) -> dict:
        return {
            "evaluations_with_missing_responses": [str(i) for i in self.evaluations_with_missing_responses],
            "duplicated_evaluation_ids": [str(i) for i in self.duplicated_evaluation_ids],
            "questions_with_missing_weight": [str(i) for i in self.questions_with_missing_weight],
            "low_sample_categories": [str(i) for i in self.low_sample_categories],
            "low_sample_questions": [str(i) for i in self.low_sample_questions],
        }


# ---------------------------------------------------------------------------
# Main output DTO
# ---------------------------------------------------------------------------


@dataclass
class AnalyticsResult:
    """Complete analytics output for one evaluatee."""

    human_summary: str
    json_output: dict
    chart_datasets: dict

    def to_dict(self) -> dict:
        return {
            "human_summary": self.human_summary,
            "json_output": self.json_output,
            "chart_datasets": self.chart_datasets,
        }
