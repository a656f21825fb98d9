"""
Base Pipeline

Run lifecycle shared by every stat pipeline.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import ClassVar, Iterator, Optional

from core.logging import clear_run_context
from db.base import db
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from schemas.pipeline import PipelineResult


@contextmanager
def _connection() -> Iterator[None]:
    """
    Hold a database connection for the current thread.

    Peewee connections are thread-local; one the caller already opened is
    reused and left open.
    """
    opened_here = db.is_closed()
    if opened_here:
        db.connect()
    try:
        yield
    finally:
        if opened_here and not db.is_closed():
            db.close()


class BasePipeline(ABC):
    """
    A named unit of work over one date or one season.

    Subclasses set ``config`` and implement ``execute``. The base class
    records the run in ``pipeline_runs``, binds the run's log context and
    turns any exception into an error result, so a failed run never
    raises out of ``run``.

    Example:
        class WeeklyRollupPipeline(BasePipeline):
            config = PipelineConfig(
                name="weekly_rollup",
                display_name="Weekly Roll-up",
                description="Rolls player and team days into week lines",
                writes=("team_week_stat_lines",),
            )

            def execute(self, ctx: PipelineContext) -> None:
                rows = build_team_weeks(fetch_records(TeamDayStatLine, week_id=1), week)
                ctx.record_write(upsert_by_keys(TeamWeekStatLine, ["team_id", "week_id"], rows))
    """

    config: ClassVar[PipelineConfig]

    def __init__(self):
        if getattr(self.__class__, "config", None) is None:
            raise ValueError(
                f"{self.__class__.__name__} must define a 'config' class attribute"
            )

    @abstractmethod
    def execute(self, ctx: PipelineContext) -> None:
        """
        Do the pipeline's work.

        Runs in a worker thread, so blocking database and collaborator
        calls are fine. Call ``ctx.skip(reason)`` to end as a no-op;
        raise to fail the run.
        """

    def before_execute(self, ctx: PipelineContext) -> None:
        """Hook for resolving collaborators or validating inputs."""

    def after_execute(self, ctx: PipelineContext) -> None:
        """Hook called after a successful, non-skipped execute()."""

    def _run_sync(
        self,
        date_override: Optional[date] = None,
        season_id: Optional[int] = None,
    ) -> PipelineResult:
        with _connection():
            ctx = PipelineContext(
                self.config.name, date_override=date_override, season_id=season_id
            )
            try:
                ctx.start_tracking()
                self.before_execute(ctx)
                self.execute(ctx)
                if ctx.skip_reason:
                    return ctx.mark_skipped()
                self.after_execute(ctx)
                return ctx.mark_success()
            except Exception as e:
                return ctx.mark_failed(e)
            finally:
                clear_run_context()

    async def run(
        self,
        date_override: Optional[date] = None,
        season_id: Optional[int] = None,
    ) -> PipelineResult:
        """
        Run the pipeline in a worker thread.

        Args:
            date_override: Process this date instead of the scrape target
                date for the current time. Used for backfills.
            season_id: Season to process, for roll-up pipelines.

        Returns:
            PipelineResult with status, timing and rows written per table
        """
        return await asyncio.to_thread(self._run_sync, date_override, season_id)

    @classmethod
    def get_name(cls) -> str:
        return cls.config.name

    @classmethod
    def get_info(cls) -> dict:
        """Pipeline metadata for listings."""
        config = cls.config
        return {
            "name": config.name,
            "display_name": config.display_name,
            "description": config.description,
            "target_table": config.target_table,
            "writes": list(config.writes),
            "season_scoped": config.season_scoped,
            "depends_on": list(config.depends_on),
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.config.name})>"
