"""
Pipeline Context

Per-run state handed to ``execute``: what the run covers (target date or
season), the audit row, the run-bound logger and the upserts it made.
"""

from __future__ import annotations

import traceback
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from core.exceptions import PersistenceError
from core.logging import bind_run_context, get_logger
from db.models.pipeline_run import FAILED, SKIPPED, SUCCESS, PipelineRun
from schemas.common import ApiStatus
from schemas.pipeline import PipelineResult
from schemas.store import UpsertResult
from services.schedule_service import get_target_date, league_now


@dataclass
class PipelineContext:
    """
    State of one pipeline run.

    Usage:
        ctx = PipelineContext("player_days", date_override=date(2025, 1, 4))
        ctx.start_tracking()
        try:
            ctx.record_write(upsert_by_keys(PlayerDayStatLine, keys, rows))
            ctx.raise_for_persistence()
            return ctx.mark_success()
        except Exception as e:
            return ctx.mark_failed(e)
    """

    pipeline_name: str
    date_override: Optional[date] = None
    season_id: Optional[int] = None
    run_id: uuid.UUID = field(default_factory=uuid.uuid4)
    started_at: datetime = field(default_factory=league_now)

    records_processed: int = 0
    skip_reason: Optional[str] = None
    write_results: list[UpsertResult] = field(default_factory=list)

    _db_run: Optional[PipelineRun] = field(default=None, repr=False)
    _log: Any = field(default=None, repr=False)

    def __post_init__(self):
        self._log = get_logger("pipeline").bind(pipeline=self.pipeline_name)

    @property
    def log(self):
        return self._log

    @property
    def target_date(self) -> date:
        """The date override, or the scrape target date for the run start time."""
        return self.date_override or get_target_date(self.started_at)

    @property
    def today(self) -> date:
        """League-local calendar date, used for week completeness."""
        return self.started_at.date()

    @property
    def scope(self) -> str:
        if self.season_id is not None:
            return f"season:{self.season_id}"
        return self.target_date.isoformat()

    def start_tracking(self) -> None:
        """Open the audit row and bind the run's log context."""
        self._db_run = PipelineRun.begin(self.pipeline_name, scope=self.scope)
        self.run_id = self._db_run.id
        bind_run_context(str(self.run_id), self.pipeline_name, self.scope)
        self._log = self._log.bind(run_id=str(self.run_id))
        self._log.info("pipeline_started")

    def skip(self, reason: str) -> None:
        """Mark the run as an intentional no-op."""
        self.skip_reason = reason

    def record_write(self, result: UpsertResult) -> UpsertResult:
        self.write_results.append(result)
        self.records_processed += result.written + result.deleted
        return result

    def rows_by_table(self) -> dict[str, int]:
        counts: Counter = Counter()
        for result in self.write_results:
            counts[result.table] += result.written + result.deleted
        return dict(counts)

    def raise_for_persistence(self) -> None:
        """
        Raise PersistenceError if any tracked upsert reported errors.

        Called once all writes have been attempted, so one bad batch does
        not stop the others from landing.
        """
        failed = [result for result in self.write_results if not result.ok]
        if not failed:
            return
        errors = [error for result in failed for error in result.errors]
        tables = ", ".join(sorted({result.table for result in failed}))
        raise PersistenceError(tables, errors)

    def _finish(
        self,
        status: ApiStatus,
        message: str,
        records: int,
        error: Optional[str] = None,
    ) -> PipelineResult:
        completed_at = league_now()
        return PipelineResult(
            status=status,
            message=message,
            scope=self.scope,
            started_at=self.started_at.isoformat(),
            completed_at=completed_at.isoformat(),
            duration_seconds=(completed_at - self.started_at).total_seconds(),
            records_processed=records,
            tables=self.rows_by_table(),
            error=error,
        )

    def mark_success(self, message: Optional[str] = None) -> PipelineResult:
        if self._db_run:
            self._db_run.finish(SUCCESS, self.records_processed)
        result = self._finish(
            ApiStatus.SUCCESS,
            message or f"{self.pipeline_name} completed successfully",
            self.records_processed,
        )
        self._log.info(
            "pipeline_completed",
            records_processed=self.records_processed,
            tables=result.tables,
            duration_seconds=result.duration_seconds,
        )
        return result

    def mark_skipped(self) -> PipelineResult:
        if self._db_run:
            self._db_run.finish(SKIPPED, detail=self.skip_reason)
        self._log.info("pipeline_skipped", reason=self.skip_reason)
        return self._finish(
            ApiStatus.SKIPPED, f"{self.pipeline_name} skipped: {self.skip_reason}", 0
        )

    def mark_failed(self, error: Exception) -> PipelineResult:
        """
        Close the run as failed.

        Must be called from inside the ``except`` block so the traceback
        of ``error`` is still the one being handled.
        """
        error_msg = f"{type(error).__name__}: {error}"
        tb = traceback.format_exc()
        if self._db_run:
            self._db_run.finish(FAILED, self.records_processed, detail=error_msg)
        self._log.error("pipeline_failed", error=error_msg, traceback=tb)
        return self._finish(
            ApiStatus.ERROR,
            f"{self.pipeline_name} failed",
            self.records_processed,
            error=f"{error_msg}\n{tb}",
        )
