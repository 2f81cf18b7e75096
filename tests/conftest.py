from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from app.core.config import settings

# Override settings for tests
settings.app_env = "development"
settings.users_have_user_type = False

from app.analytics.source import InMemoryDataSource  # noqa: E402
from app.api.v1.analytics import get_analytics_source  # noqa: E402
from app.main import app  # noqa: E402


@pytest.fixture
def snapshot() -> dict:
    """Small evaluation snapshot for professor 1.

    Evaluation 1 → (4×4 + 5×1) / 5 = 4.2, evaluation 2 → (5×4 + 4×1) / 5 = 4.8,
    evaluation 3 has no responses and falls back to its overall_score 3.9.
    """
    return {
        "professors": [
            {"user_id": 1, "full_name": "Ada M Lovelace", "department": "Mathematics"},
            {"user_id": 2, "full_name": "Charles Babbage", "department": None},
        ],
        "categories": [
            {"category_id": 10, "name": "Teaching"},
            {"category_id": 20, "name": "Communication"},
        ],
        "questions": [
            {"question_id": 100, "text": "Explains concepts clearly", "category_id": 10, "weight": 4},
            {"question_id": 200, "text": "Responds to questions", "category_id": 20, "weight": None},
        ],
        "evaluations": [
            {
                "evaluation_id": 1,
                "evaluator_id": 501,
                "evaluatee_id": 1,
                "date_submitted": "2024-02-10T09:00:00",
                "overall_score": 4.0,
                "course_id": 7,
                "comments": "Great and helpful instructor",
                "evaluator_type": "student",
            },
            {
                "evaluation_id": 2,
                "evaluator_id": 502,
                "evaluatee_id": 1,
                "date_submitted": "2024-09-15T09:00:00",
                "overall_score": 4.5,
                "course_id": 8,
                "comments": "The course was confusing and the instructor was late",
                "evaluator_type": "Faculty",
            },
            {
                "evaluation_id": 3,
                "evaluator_id": 503,
                "evaluatee_id": 1,
                "date_submitted": "2024-10-01T09:00:00",
                "overall_score": 3.9,
                "course_id": 7,
                "comments": None,
                "evaluator_type": "student",
            },
            {
                "evaluation_id": 9,
                "evaluator_id": 504,
                "evaluatee_id": 2,
                "date_submitted": "2024-10-01T09:00:00",
                "overall_score": 2.0,
                "course_id": 9,
            },
        ],
        "responses": [
            {"evaluation_id": 1, "question_id": 100, "rating": 4},
            {"evaluation_id": 1, "question_id": 200, "rating": 5},
            {"evaluation_id": 2, "question_id": 100, "rating": 5},
            {"evaluation_id": 2, "question_id": 200, "rating": 4},
            {"evaluation_id": 9, "question_id": 100, "rating": 2},
        ],
    }


@pytest.fixture
def source(snapshot: dict) -> InMemoryDataSource:
    return InMemoryDataSource.from_dict(snapshot)


@pytest.fixture
async def client(source: InMemoryDataSource) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_analytics_source] = lambda: source
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.pop(get_analytics_source, None)
