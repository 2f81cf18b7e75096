from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Evaluation(Base):
    __tablename__ = "evaluation"

    # Legacy ingests can repeat an evaluation_id; analytics selects columns,
    # never entities, so repeated rows are all returned.
    evaluation_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    evaluator_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    evaluatee_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    date_submitted: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    overall_score: Mapped[float | None] = mapped_column(Numeric(4, 2), nullable=True)
    course_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)


class Response(Base):
    __tablename__ = "response"

    response_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    evaluation_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("evaluation.evaluation_id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id: Mapped[int] = mapped_column(Integer, ForeignKey("question.question_id"), nullable=False)
    rating: Mapped[float] = mapped_column(Numeric(4, 2), nullable=False)
