"""
Pipeline Run Model

One row per pipeline execution: which pipeline, what it covered (a date or
a season) and how it ended. Reruns of the same scope add rows; the stat
tables themselves stay idempotent.
"""

import uuid
from typing import Optional

from peewee import CharField, DateTimeField, IntegerField, TextField, UUIDField

from db.base import BaseModel, utcnow


RUNNING = "running"
SUCCESS = "success"
SKIPPED = "skipped"
FAILED = "failed"

FINAL_STATUSES = (SUCCESS, SKIPPED, FAILED)


class PipelineRun(BaseModel):
    """
    Audit record of a pipeline execution.

    ``detail`` holds the skip reason for skipped runs and the error text
    for failed ones.
    """

    id = UUIDField(primary_key=True, default=uuid.uuid4)
    pipeline_name = CharField(max_length=50, index=True)
    scope = CharField(max_length=50, null=True)
    started_at = DateTimeField()
    completed_at = DateTimeField(null=True)
    status = CharField(max_length=20, index=True, default=RUNNING)
    records_processed = IntegerField(default=0)
    detail = TextField(null=True)

    class Meta:
        table_name = "pipeline_runs"

    def __repr__(self) -> str:
        return f"<PipelineRun({self.pipeline_name} {self.scope} {self.status})>"

    @classmethod
    def begin(cls, pipeline_name: str, scope: Optional[str] = None) -> "PipelineRun":
        return cls.create(pipeline_name=pipeline_name, scope=scope, started_at=utcnow())

    def finish(
        self,
        status: str,
        records_processed: int = 0,
        detail: Optional[str] = None,
    ) -> None:
        """Close the run with one of FINAL_STATUSES."""
        if status not in FINAL_STATUSES:
            raise ValueError(f"Unknown run status: {status}")
        self.status = status
        self.completed_at = utcnow()
        self.records_processed = records_processed
        self.detail = detail or None
        self.save()

    @property
    def elapsed(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    @classmethod
    def recent(cls, pipeline_name: Optional[str] = None, limit: int = 20):
        """Latest runs first, optionally for one pipeline."""
        query = cls.select()
        if pipeline_name:
            query = query.where(cls.pipeline_name == pipeline_name)
        return list(query.order_by(cls.started_at.desc()).limit(limit))
