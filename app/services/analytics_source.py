"""PostgreSQL-backed AnalyticsDataSource.

Async DB fetch layer for the analytics engine; all computation stays in
app.analytics (pure functions over the rows returned here).
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from sqlalchemy import func, literal_column, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.analytics.types import (
    Category as CategoryRow,
    EvaluationRecord,
    EvaluatorType,
    ProfessorProfile,
    Question as QuestionRow,
    ResponseRecord,
)
from app.db.capabilities import SchemaCapabilities
from app.models.category import Category
from app.models.department import Department
from app.models.evaluation import Evaluation, Response
from app.models.question import Question
from app.models.user import User

logger = logging.getLogger(__name__)


def _to_float(value: Decimal | float | None) -> float | None:
    return float(value) if value is not None else None


def full_name(first: str | None, middle: str | None, last: str | None) -> str:
    """Join name parts, dropping blank ones."""
    return re.sub(r"\s+", " ", " ".join(p for p in (first, middle, last) if p)).strip()


class SqlAnalyticsSource:
    """Reads evaluation snapshots with SQLAlchemy Core selects.

    evaluator_type is matched case-insensitively against ``users.user_type``
    (when the column exists) or ``users.role`` and handed to the engine as a
    normalized EvaluatorType.
    """

    def __init__(self, db: AsyncSession, capabilities: SchemaCapabilities | None = None):
        self.db = db
        self.capabilities = capabilities or SchemaCapabilities()

    async def fetch_evaluations(
        self,
        evaluatee_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
        course_ids: list[int] | None = None,
        evaluator_type: EvaluatorType | None = None,
    ) -> list[EvaluationRecord]:
        evaluator = User.__table__.alias("evaluator")
        type_columns = [evaluator.c.role]
        if self.capabilities.users_have_user_type:
            type_columns.insert(0, literal_column("evaluator.user_type"))

        stmt = (
            select(
                Evaluation.evaluation_id,
                Evaluation.evaluator_id,
                Evaluation.evaluatee_id,
                Evaluation.date_submitted,
                Evaluation.overall_score,
                Evaluation.course_id,
                Evaluation.comments,
                *type_columns,
            )
            .select_from(Evaluation)
            .outerjoin(evaluator, evaluator.c.user_id == Evaluation.evaluator_id)
            .where(Evaluation.evaluatee_id == evaluatee_id)
        )
        if start_date is not None:
            stmt = stmt.where(Evaluation.date_submitted >= datetime.combine(start_date, time.min))
        if end_date is not None:
            # Whole-day bound: anything before the next midnight
            stmt = stmt.where(Evaluation.date_submitted < datetime.combine(end_date + timedelta(days=1), time.min))
        if course_ids is not None:
            stmt = stmt.where(Evaluation.course_id.in_(course_ids))
        if evaluator_type is not None:
            wanted = evaluator_type.value.lower()
            stmt = stmt.where(or_(*(func.lower(func.coalesce(col, "")) == wanted for col in type_columns)))

        rows = (await self.db.execute(stmt)).all()

        records = []
        for row in rows:
            if evaluator_type is not None:
                # Matched through one of the type columns above
                normalized = evaluator_type
            else:
                raw_types = row[7:]
                normalized = next((t for t in map(EvaluatorType.parse, raw_types) if t), None)
            records.append(
                EvaluationRecord(
                    evaluation_id=row.evaluation_id,
                    evaluator_id=row.evaluator_id,
                    evaluatee_id=row.evaluatee_id,
                    date_submitted=row.date_submitted,
                    overall_score=_to_float(row.overall_score),
                    course_id=row.course_id,
                    comments=row.comments,
                    evaluator_type=normalized,
                )
            )

        logger.debug("Fetched %d evaluation rows for evaluatee %s", len(records), evaluatee_id)
        return records

    async def fetch_responses(self, evaluation_ids: list[int]) -> list[ResponseRecord]:
        if not evaluation_ids:
            return []

        stmt = (
            select(
                Response.evaluation_id,
                Response.rating,
                Question.question_id,
                Question.text,
                Question.weight,
                Category.category_id,
                Category.name,
            )
            .join(Question, Question.question_id == Response.question_id)
            .join(Category, Category.category_id == Question.category_id)
            .where(Response.evaluation_id.in_(evaluation_ids), Response.rating.is_not(None))
            .order_by(Response.response_id)
        )
        rows = (await self.db.execute(stmt)).all()

        categories: dict[int, CategoryRow] = {}
        questions: dict[int, QuestionRow] = {}
        responses = []
        for row in rows:
            category = categories.setdefault(
                row.category_id, CategoryRow(category_id=row.category_id, name=row.name)
            )
            question = questions.setdefault(
                row.question_id,
                QuestionRow(
                    question_id=row.question_id,
                    text=row.text,
                    category=category,
                    weight=_to_float(row.weight),
                ),
            )
            responses.append(
                ResponseRecord(evaluation_id=row.evaluation_id, question=question, rating=float(row.rating))
            )

        logger.debug("Fetched %d responses for %d evaluations", len(responses), len(evaluation_ids))
        return responses

    async def fetch_professor_profile(self, evaluatee_id: int) -> ProfessorProfile | None:
        stmt = (
            select(
                User.user_id,
                User.first_name,
                User.middle_initial,
                User.last_name,
                Department.name.label("department"),
            )
            .outerjoin(Department, Department.department_id == User.department_id)
            .where(User.user_id == evaluatee_id)
        )
        row = (await self.db.execute(stmt)).first()
        if row is None:
            return None
        return ProfessorProfile(
            user_id=row.user_id,
            full_name=full_name(row.first_name, row.middle_initial, row.last_name),
            department=row.department,
        )

    async def find_user_id_by_email(self, email: str) -> int | None:
        stmt = select(User.user_id).where(func.lower(User.email) == email.lower()).limit(1)
        return (await self.db.execute(stmt)).scalar_one_or_none()
