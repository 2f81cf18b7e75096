"""Data Quality Auditor: Pipeline Step 6."""

from __future__ import annotations

import logging

from app.analytics.scoring import has_missing_weight
from app.analytics.types import (
    CategoryStat,
    DataQualityReport,
    QuestionStat,
    ResponseRecord,
    ScoredEvaluation,
)

logger = logging.getLogger(__name__)


def audit_data_quality(
    scored: list[ScoredEvaluation],
    duplicate_ids: list[int],
    responses: list[ResponseRecord],
    categories: list[CategoryStat],
    questions: list[QuestionStat],
    min_responses: int,
) -> DataQualityReport:
    """Collect anomalies from the outputs of the earlier stages.

    ``responses`` must already be restricted to the deduplicated evaluations.
    """
    missing_weight = sorted(
        {r.question.question_id for r in responses if has_missing_weight(r.question)}
    )

    report = DataQualityReport(
        evaluations_with_missing_responses=[
            s.evaluation.evaluation_id for s in scored if s.responses_count == 0
        ],
        duplicated_evaluation_ids=sorted(duplicate_ids),
        questions_with_missing_weight=missing_weight,
        low_sample_categories=[c.category_id for c in categories if c.responses < min_responses],
        low_sample_questions=[q.question_id for q in questions if q.responses < min_responses],
    )

    if report.evaluations_with_missing_responses or report.duplicated_evaluation_ids or missing_weight:
        logger.info(
            "Data quality: missing_responses=%d, duplicates=%d, missing_weight=%d",
            len(report.evaluations_with_missing_responses),
            len(report.duplicated_evaluation_ids),
            len(missing_weight),
        )
    return report
