from sqlalchemy import ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Question(Base):
    __tablename__ = "question"

    question_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("category.category_id", ondelete="CASCADE"), nullable=False, index=True
    )
    weight: Mapped[float | None] = mapped_column(Numeric(6, 2), nullable=True)  # NULL / 0 → scored as 1
