from typing import Optional

from pydantic import BaseModel, ConfigDict

from .common import ApiStatus


class PipelineResult(BaseModel):
    """Outcome of one pipeline run"""

    model_config = ConfigDict(use_enum_values=True)

    status: ApiStatus
    message: str
    scope: Optional[str] = None
    started_at: str
    completed_at: Optional[str] = None
    duration_seconds: Optional[float] = None
    records_processed: Optional[int] = None
    tables: dict[str, int] = {}
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.status == ApiStatus.ERROR


class SeasonAggregationResult(BaseModel):
    """Results of the chained season roll-up (weekly, matchups, standings)"""

    model_config = ConfigDict(use_enum_values=True)

    status: ApiStatus
    season_id: Optional[int] = None
    results: dict[str, PipelineResult] = {}

    @property
    def failed(self) -> bool:
        return self.status == ApiStatus.ERROR
