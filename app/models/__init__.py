from app.models.category import Category
from app.models.department import Department
from app.models.evaluation import Evaluation, Response
from app.models.question import Question
from app.models.user import User

__all__ = [
    "Category",
    "Department",
    "Evaluation",
    "Question",
    "Response",
    "User",
]
