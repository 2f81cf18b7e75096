"""Score Computation Stage: Pipeline Step 2.

Computes one score per deduplicated evaluation:

    eval_score = Σ(rating_i × weight_i) / Σ(weight_i)

  - weight_i = question weight if > 0, else 1
  - Evaluations without responses (legacy rows recorded before per-response
    weighting) fall back to the stored overall_score
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict

from app.analytics.types import EvaluationRecord, Question, ResponseRecord, ScoredEvaluation

logger = logging.getLogger(__name__)


def effective_weight(question: Question) -> float:
    """Configured weight when positive, otherwise 1."""
    if question.weight is not None and question.weight > 0:
        return float(question.weight)
    return 1.0


def has_missing_weight(question: Question) -> bool:
    return question.weight is None or question.weight == 0


def weighted_average(responses: list[ResponseRecord]) -> float | None:
    """Weighted mean rating; None when there is nothing to weigh.

    math.fsum keeps the result independent of row order.
    """
    if not responses:
        return None
    weighted_sum = math.fsum(r.rating * effective_weight(r.question) for r in responses)
    weight_total = math.fsum(effective_weight(r.question) for r in responses)
    if weight_total <= 0:
        return None
    return weighted_sum / weight_total


def group_responses(responses: list[ResponseRecord]) -> dict[int, list[ResponseRecord]]:
    grouped: dict[int, list[ResponseRecord]] = defaultdict(list)
    for resp in responses:
        grouped[resp.evaluation_id].append(resp)
    return grouped


def score_evaluation(
    evaluation: EvaluationRecord,
    responses: list[ResponseRecord],
) -> ScoredEvaluation:
    score = weighted_average(responses) if responses else None
    if score is None:
        score = evaluation.overall_score
    return ScoredEvaluation(evaluation=evaluation, eval_score=score, responses_count=len(responses))


def score_evaluations(
    evaluations: list[EvaluationRecord],
    responses: list[ResponseRecord],
) -> list[ScoredEvaluation]:
    """Score every evaluation; responses of unknown evaluations are ignored."""
    grouped = group_responses(responses)
    scored = [score_evaluation(ev, grouped.get(ev.evaluation_id, [])) for ev in evaluations]

    fallback_count = sum(1 for s in scored if s.used_fallback)
    logger.debug(
        "Scoring: evaluations=%d, responses=%d, fallback_to_overall_score=%d",
        len(scored),
        len(responses),
        fallback_count,
    )
    return scored
