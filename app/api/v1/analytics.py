"""Professor analytics API: weighted scores, trends, comments and data quality."""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.analytics.lexicon import get_lexicon
from app.analytics.pipeline import get_professor_analytics
from app.analytics.source import AnalyticsDataSource
from app.analytics.types import InputNotFound, InvalidFilter
from app.core.config import settings
from app.core.exceptions import BadRequestError, NotFoundError
from app.db.capabilities import SchemaCapabilities
from app.db.postgres import get_db
from app.schemas.analytics import ProfessorAnalyticsResponse
from app.services.analytics_source import SqlAnalyticsSource

router = APIRouter(prefix="/analytics", tags=["analytics"])


async def get_analytics_source(request: Request, db: AsyncSession = Depends(get_db)) -> AnalyticsDataSource:
    """SQL data source using the schema capabilities resolved at startup."""
    capabilities = getattr(request.app.state, "schema_capabilities", None) or SchemaCapabilities()
    return SqlAnalyticsSource(db, capabilities)


@router.get("/professors/{evaluatee_id}", response_model=ProfessorAnalyticsResponse)
async def professor_analytics(
    evaluatee_id: str,
    start_date: str | None = Query(None, description="Inclusive, YYYY-MM-DD"),
    end_date: str | None = Query(None, description="Inclusive, YYYY-MM-DD"),
    course_ids: str | None = Query(None, description="Comma-separated course ids"),
    evaluator_type: str | None = Query(None, description="Student, Faculty or Supervisor"),
    min_responses: str | None = Query(None, description="Low-sample threshold (default from settings)"),
    source: AnalyticsDataSource = Depends(get_analytics_source),
):
    """Full analytics for one instructor.

    Returns:
    - human_summary: 4–6 sentence narrative
    - json_output: topline, category/question stats, trend, comments, data quality
    - chart_datasets: category_bar, trend_line, detailed_table
    """
    result = await get_professor_analytics(
        source,
        evaluatee_id,
        start_date=start_date,
        end_date=end_date,
        course_ids=course_ids,
        evaluator_type=evaluator_type,
        min_responses=min_responses if min_responses is not None else settings.analytics_min_responses,
        lexicon=get_lexicon(settings.analytics_lexicon_path),
        comment_limit=settings.analytics_comment_limit,
    )
    if isinstance(result, InvalidFilter):
        raise BadRequestError(result.to_dict())
    if isinstance(result, InputNotFound):
        raise NotFoundError(result.to_dict())

    return ProfessorAnalyticsResponse.model_validate(result.to_dict())
