from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class User(Base):
    """Account row.

    Some deployments also carry a ``user_type`` column; it is not mapped here
    and is only read when SchemaCapabilities reports it.
    """

    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    middle_initial: Mapped[str | None] = mapped_column(String(5), nullable=True)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    role: Mapped[str | None] = mapped_column(String(30), nullable=True)  # student / faculty / supervisor / admin
    department_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("department.department_id", ondelete="SET NULL"), nullable=True
    )
