"""Data collaborator interface for the analytics engine.

The engine never talks to storage itself. Callers supply an
``AnalyticsDataSource``; the SQLAlchemy implementation lives in
app.services.analytics_source, the in-memory one below backs tests and
offline runs over a JSON snapshot.
"""

from __future__ import annotations

import dataclasses
import json
from datetime import date, datetime
from pathlib import Path
from typing import Protocol

from app.analytics.filters import apply_filters
from app.analytics.types import (
    AnalyticsFilters,
    Category,
    EvaluationRecord,
    EvaluatorType,
    ProfessorProfile,
    Question,
    ResponseRecord,
)


class AnalyticsDataSource(Protocol):
    async def fetch_evaluations(
        self,
        evaluatee_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
        course_ids: list[int] | None = None,
        evaluator_type: EvaluatorType | None = None,
    ) -> list[EvaluationRecord]:
        """Filtered, not yet deduplicated evaluation rows."""
        ...

    async def fetch_responses(self, evaluation_ids: list[int]) -> list[ResponseRecord]:
        """Responses joined with question and category."""
        ...

    async def fetch_professor_profile(self, evaluatee_id: int) -> ProfessorProfile | None: ...


class InMemoryDataSource:
    """AnalyticsDataSource over rows already held in memory."""

    def __init__(
        self,
        profiles: list[ProfessorProfile] | None = None,
        evaluations: list[EvaluationRecord] | None = None,
        responses: list[ResponseRecord] | None = None,
    ):
        self.profiles = {p.user_id: p for p in profiles or []}
        self.evaluations = list(evaluations or [])
        self.responses = list(responses or [])

    async def fetch_evaluations(
        self,
        evaluatee_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
        course_ids: list[int] | None = None,
        evaluator_type: EvaluatorType | None = None,
    ) -> list[EvaluationRecord]:
        filters = AnalyticsFilters(
            evaluatee_id=evaluatee_id,
            start_date=start_date,
            end_date=end_date,
            course_ids=course_ids,
            evaluator_type=evaluator_type,
        )
        return apply_filters(self.evaluations, filters)

    async def fetch_responses(self, evaluation_ids: list[int]) -> list[ResponseRecord]:
        wanted = set(evaluation_ids)
        return [r for r in self.responses if r.evaluation_id in wanted]

    async def fetch_professor_profile(self, evaluatee_id: int) -> ProfessorProfile | None:
        profile = self.profiles.get(evaluatee_id)
        return dataclasses.replace(profile, course_ids=list(profile.course_ids)) if profile else None

    # -- snapshot loading ---------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict) -> InMemoryDataSource:
        """Build from a snapshot dict.

        Keys: professors, categories, questions, evaluations, responses.
        Responses reference questions by ``question_id``; questions reference
        categories by ``category_id``. Ids given as numeric strings are
        converted; anything else raises ValueError naming the field.
        """
        categories = {}
        for c in data.get("categories", []):
            category_id = _snapshot_id(c, "category_id")
            categories[category_id] = Category(category_id=category_id, name=c.get("name", ""))
        questions = {}
        for q in data.get("questions", []):
            question_id = _snapshot_id(q, "question_id")
            questions[question_id] = Question(
                question_id=question_id,
                text=q.get("text", ""),
                category=categories.get(_snapshot_id(q, "category_id", optional=True)),
                weight=q.get("weight"),
            )
        profiles = [
            ProfessorProfile(
                user_id=_snapshot_id(p, "user_id"),
                full_name=p.get("full_name", ""),
                department=p.get("department"),
            )
            for p in data.get("professors", [])
        ]
        evaluations = [
            EvaluationRecord(
                evaluation_id=_snapshot_id(e, "evaluation_id"),
                evaluator_id=_snapshot_id(e, "evaluator_id", optional=True) or 0,
                evaluatee_id=_snapshot_id(e, "evaluatee_id"),
                date_submitted=datetime.fromisoformat(e["date_submitted"]),
                overall_score=e.get("overall_score"),
                course_id=_snapshot_id(e, "course_id", optional=True),
                comments=e.get("comments"),
                evaluator_type=EvaluatorType.parse(e.get("evaluator_type")),
            )
            for e in data.get("evaluations", [])
        ]
        responses = []
        for r in data.get("responses", []):
            if r.get("rating") is None:
                continue
            question_id = _snapshot_id(r, "question_id")
            responses.append(
                ResponseRecord(
                    evaluation_id=_snapshot_id(r, "evaluation_id"),
                    question=questions.get(question_id) or Question(question_id=question_id),
                    rating=float(r["rating"]),
                )
            )
        return cls(profiles=profiles, evaluations=evaluations, responses=responses)

    @classmethod
    def from_json_file(cls, path: str | Path) -> InMemoryDataSource:
        return cls.from_dict(json.loads(Path(path).read_text(encoding="utf-8")))


def _snapshot_id(row: dict, key: str, optional: bool = False) -> int | None:
    value = row.get(key)
    if value is None:
        if optional:
            return None
        raise ValueError(f"snapshot row is missing {key!r}")
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    if isinstance(value, str):
        value = value.strip()
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer, got {value!r}") from None
