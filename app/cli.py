"""
faculty-analytics: print or save the analytics report for one instructor.

Usage:
    faculty-analytics --professor-user-id=42
    faculty-analytics --email=jane.doe@example.edu --start-date=2024-01-01 --out=report.json
    faculty-analytics --snapshot=snapshot.json --professor-user-id=42   # no database needed
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from app.analytics.lexicon import get_lexicon
from app.analytics.pipeline import get_professor_analytics
from app.analytics.source import AnalyticsDataSource, InMemoryDataSource
from app.core.config import settings
from app.core.logging import setup_logging

logger = logging.getLogger("faculty_analytics")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="faculty-analytics", description="Per-instructor evaluation analytics")
    who = parser.add_mutually_exclusive_group(required=True)
    who.add_argument("--professor-user-id", help="Evaluatee user id")
    who.add_argument("--email", help="Look up the evaluatee by e-mail (database only)")
    parser.add_argument("--start-date", help="Inclusive, YYYY-MM-DD")
    parser.add_argument("--end-date", help="Inclusive, YYYY-MM-DD")
    parser.add_argument("--course-ids", help="Comma-separated course ids")
    parser.add_argument("--evaluator-type", help="Student, Faculty or Supervisor")
    parser.add_argument("--min-responses", default=str(settings.analytics_min_responses))
    parser.add_argument("--snapshot", help="JSON snapshot file to analyze instead of the database")
    parser.add_argument("--out", help="Write the JSON report to this file instead of stdout")
    return parser


async def _analyze(args: argparse.Namespace, source: AnalyticsDataSource, evaluatee_id) -> dict:
    result = await get_professor_analytics(
        source,
        evaluatee_id,
        start_date=args.start_date,
        end_date=args.end_date,
        course_ids=args.course_ids,
        evaluator_type=args.evaluator_type,
        min_responses=args.min_responses,
        lexicon=get_lexicon(settings.analytics_lexicon_path),
        comment_limit=settings.analytics_comment_limit,
    )
    return result.to_dict()


async def _run_with_database(args: argparse.Namespace) -> dict:
    from app.db.capabilities import resolve_capabilities
    from app.db.postgres import async_session_factory, engine
    from app.services.analytics_source import SqlAnalyticsSource

    try:
        capabilities = await resolve_capabilities(engine)
        async with async_session_factory() as db:
            source = SqlAnalyticsSource(db, capabilities)
            evaluatee_id = args.professor_user_id
            if args.email:
                evaluatee_id = await source.find_user_id_by_email(args.email)
                if evaluatee_id is None:
                    return {"error": True, "message": f"No user found with email {args.email}"}
            return await _analyze(args, source, evaluatee_id)
    finally:
        await engine.dispose()


async def run(args: argparse.Namespace) -> dict:
    if args.snapshot:
        if args.email:
            return {"error": True, "message": "--email requires the database; use --professor-user-id"}
        try:
            source = InMemoryDataSource.from_json_file(args.snapshot)
        except ValueError as exc:
            return {"error": True, "message": f"Invalid snapshot {args.snapshot}: {exc}"}
        return await _analyze(args, source, args.professor_user_id)
    return await _run_with_database(args)


def main(argv: list[str] | None = None) -> int:
    setup_logging(stream=sys.stderr)
    args = build_parser().parse_args(argv)

    output = asyncio.run(run(args))
    rendered = json.dumps(output, indent=2, ensure_ascii=False)

    if output.get("error"):
        print(rendered, file=sys.stderr)
        return 1

    if args.out:
        out_path = Path(args.out).resolve()
        out_path.write_text(rendered, encoding="utf-8")
        logger.info("Wrote analytics to %s", out_path)
    else:
        print(rendered)
    return 0


if __name__ == "__main__":
    sys.exit(main())
