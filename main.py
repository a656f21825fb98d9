"""
GSHL Data Platform CLI

Runs the stat pipelines from the command line or a scheduler.

Usage:
    python main.py list
    python main.py run player_days
    python main.py run player_days --date 2025-01-04
    python main.py run weekly_rollup --season-id 7
    python main.py season --season-id 7
    python main.py history player_days --limit 5

Environment Variables:
    DATABASE_URL - peewee database URL (sqlite:///gshl.db, postgresql://...)
    ROSTER_SOURCE, RATER, LINEUP_OPTIMIZER - "module:attribute" import strings
"""

import argparse
import asyncio
import sys
from datetime import date

from core.logging import setup_logging_from_settings
from db.base import close_db, init_db
from db.models.pipeline_run import PipelineRun
from pipelines import PIPELINE_REGISTRY, list_pipelines, run_pipeline, run_season_aggregation


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="GSHL stat roll-up and matchup pipelines")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List available pipelines")

    run_parser = subparsers.add_parser("run", help="Run a single pipeline")
    run_parser.add_argument("name", choices=sorted(PIPELINE_REGISTRY), help="Pipeline name")
    run_parser.add_argument("--date", type=_parse_date, help="Target date (default: scrape target date)")
    run_parser.add_argument("--season-id", type=int, help="Season to process for roll-up pipelines")

    season_parser = subparsers.add_parser(
        "season", help="Run weekly roll-up, matchup results and standings for a season"
    )
    season_parser.add_argument("--season-id", type=int, help="Season id (default: season of --date)")
    season_parser.add_argument("--date", type=_parse_date, help="Date inside the season")

    history_parser = subparsers.add_parser("history", help="Show recent pipeline runs")
    history_parser.add_argument("name", nargs="?", choices=sorted(PIPELINE_REGISTRY))
    history_parser.add_argument("--limit", type=int, default=20)

    return parser


def print_history(name: str | None, limit: int) -> None:
    for run in PipelineRun.recent(name, limit=limit):
        elapsed = f"{run.elapsed:.1f}s" if run.elapsed is not None else "-"
        print(
            f"{run.started_at:%Y-%m-%d %H:%M:%S}  {run.pipeline_name:<24} "
            f"{run.scope or '-':<12} {run.status:<8} {elapsed:>8}  {run.detail or ''}"
        )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging_from_settings()

    if args.command == "list":
        for info in list_pipelines():
            print(f"{info['name']:<24} {info['description']}")
        return 0

    init_db()
    try:
        if args.command == "history":
            print_history(args.name, args.limit)
            return 0
        if args.command == "run":
            result = asyncio.run(
                run_pipeline(args.name, date_override=args.date, season_id=args.season_id)
            )
        else:
            result = asyncio.run(
                run_season_aggregation(season_id=args.season_id, date_override=args.date)
            )
    finally:
        close_db()

    print(result.model_dump_json(indent=2))
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
