"""Filter & Dedup Stage: Pipeline Step 1.

  - Parses raw caller filters (HTTP query / CLI strings) into AnalyticsFilters,
    collecting every offending field into an InvalidFilter tagged value
  - Selects the evaluatee's rows matching all supplied filters
  - Collapses duplicate evaluation_ids, keeping the earliest submission
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from app.analytics.types import (
    AnalyticsFilters,
    EvaluationRecord,
    EvaluatorType,
    InvalidFilter,
)

logger = logging.getLogger(__name__)

DEFAULT_MIN_RESPONSES = 5


# ---------------------------------------------------------------------------
# Raw value parsing
# ---------------------------------------------------------------------------

_INVALID = object()


def _parse_int(value) -> int | object:
    if isinstance(value, bool):
        return _INVALID
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return int(value.strip(), 10)
        except ValueError:
            return _INVALID
    return _INVALID


def _parse_date(value) -> date | None | object:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError:
            return _INVALID
    return _INVALID


def _parse_course_ids(value) -> list[int] | None | object:
    if value is None:
        return None
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(",") if p.strip()]
        if not parts:
            return None
    elif isinstance(value, (list, tuple, set, frozenset)):
        parts = list(value)
    else:
        return _INVALID

    ids = [_parse_int(p) for p in parts]
    if any(i is _INVALID for i in ids):
        return _INVALID
    return sorted(set(ids))


def parse_filters(
    evaluatee_id,
    start_date=None,
    end_date=None,
    course_ids=None,
    evaluator_type=None,
    min_responses=DEFAULT_MIN_RESPONSES,
) -> AnalyticsFilters | InvalidFilter:
    """Validate raw filter values.

    Accepts already-typed values (int, date, list[int], EvaluatorType) as
    well as their string forms. Dates are ISO ``YYYY-MM-DD``; course ids may
    be a comma-separated string.

    Returns:
        AnalyticsFilters, or InvalidFilter listing every offending field.
    """
    bad: list[str] = []

    evaluatee = _parse_int(evaluatee_id)
    if evaluatee is _INVALID:
        bad.append("evaluatee_id")

    start = _parse_date(start_date)
    if start is _INVALID:
        bad.append("start_date")
    end = _parse_date(end_date)
    if end is _INVALID:
        bad.append("end_date")
    if isinstance(start, date) and isinstance(end, date) and end < start:
        bad.extend(["start_date", "end_date"])

    courses = _parse_course_ids(course_ids)
    if courses is _INVALID:
        bad.append("course_ids")

    if isinstance(evaluator_type, EvaluatorType) or evaluator_type is None:
        etype = evaluator_type
    elif isinstance(evaluator_type, str) and not evaluator_type.strip():
        etype = None
    else:
        etype = EvaluatorType.parse(evaluator_type) if isinstance(evaluator_type, str) else None
        if etype is None:
            bad.append("evaluator_type")

    min_resp = DEFAULT_MIN_RESPONSES if min_responses is None else _parse_int(min_responses)
    if min_resp is _INVALID or min_resp < 0:
        bad.append("min_responses")

    if bad:
        logger.info("Rejected analytics filters: %s", bad, extra={"outcome": "invalid_filter"})
        return InvalidFilter(fields=list(dict.fromkeys(bad)))

    return AnalyticsFilters(
        evaluatee_id=evaluatee,
        start_date=start,
        end_date=end,
        course_ids=courses,
        evaluator_type=etype,
        min_responses=min_resp,
    )


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def matches_filters(evaluation: EvaluationRecord, filters: AnalyticsFilters) -> bool:
    """True when the row belongs to the evaluatee and passes every filter."""
    if evaluation.evaluatee_id != filters.evaluatee_id:
        return False

    day = evaluation.date_submitted.date()
    if filters.start_date is not None and day < filters.start_date:
        return False
    if filters.end_date is not None and day > filters.end_date:
        return False

    if filters.course_ids is not None and evaluation.course_id not in filters.course_ids:
        return False

    if filters.evaluator_type is not None and evaluation.evaluator_type != filters.evaluator_type:
        return False

    return True


def apply_filters(
    evaluations: list[EvaluationRecord],
    filters: AnalyticsFilters,
) -> list[EvaluationRecord]:
    return [ev for ev in evaluations if matches_filters(ev, filters)]


# ---------------------------------------------------------------------------
# Dedup
# ---------------------------------------------------------------------------


def deduplicate(
    evaluations: list[EvaluationRecord],
) -> tuple[list[EvaluationRecord], list[int]]:
    """Keep the earliest row per evaluation_id.

    Returns:
        Tuple of (survivors ordered by date_submitted then evaluation_id,
        sorted evaluation_ids that occurred more than once).
    """
    ordered = sorted(evaluations, key=lambda ev: (ev.evaluation_id, ev.date_submitted))

    kept: list[EvaluationRecord] = []
    duplicates: list[int] = []
    for ev in ordered:
        if kept and kept[-1].evaluation_id == ev.evaluation_id:
            if not duplicates or duplicates[-1] != ev.evaluation_id:
                duplicates.append(ev.evaluation_id)
            continue
        kept.append(ev)

    if duplicates:
        logger.warning(
            "Collapsed duplicate evaluations: %d rows → %d, ids=%s",
            len(evaluations),
            len(kept),
            duplicates,
        )

    kept.sort(key=lambda ev: (ev.date_submitted, ev.evaluation_id))
    return kept, duplicates


def filter_and_dedup(
    evaluations: list[EvaluationRecord],
    filters: AnalyticsFilters,
) -> tuple[list[EvaluationRecord], list[EvaluationRecord], list[int]]:
    """Run the full stage.

    Returns:
        Tuple of (filtered rows before dedup, deduplicated rows, duplicate ids).
    """
    selected = apply_filters(evaluations, filters)
    deduped, duplicates = deduplicate(selected)
    logger.debug(
        "Filter & dedup: evaluatee=%s, input=%d, selected=%d, kept=%d",
        filters.evaluatee_id,
        len(evaluations),
        len(selected),
        len(deduped),
    )
    return selected, deduped, duplicates
