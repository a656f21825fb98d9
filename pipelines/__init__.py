"""
Pipeline Registry

Name lookup for the stat pipelines and the chained season roll-up.
"""

from datetime import date
from typing import Optional, Type

from core.logging import get_logger
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig, dependency_order
from pipelines.context import PipelineContext
from pipelines.player_days import PlayerDaysPipeline
from pipelines.player_day_corrections import PlayerDayCorrectionsPipeline
from pipelines.weekly_rollup import WeeklyRollupPipeline
from pipelines.matchup_results import MatchupResultsPipeline
from pipelines.team_season_standings import TeamSeasonStandingsPipeline
from schemas.pipeline import PipelineResult, SeasonAggregationResult
from schemas.common import ApiStatus


PIPELINE_REGISTRY: dict[str, Type[BasePipeline]] = {
    cls.get_name(): cls
    for cls in (
        PlayerDaysPipeline,
        PlayerDayCorrectionsPipeline,
        WeeklyRollupPipeline,
        MatchupResultsPipeline,
        TeamSeasonStandingsPipeline,
    )
}

# Weekly lines feed matchup scoring; both feed standings.
SEASON_AGGREGATION_PIPELINE_NAMES: list[str] = dependency_order(
    PIPELINE_REGISTRY[name].config
    for name in ("weekly_rollup", "matchup_results", "team_season_standings")
)


def get_pipeline(name: str) -> BasePipeline:
    """
    Instantiate a pipeline by name.

    Raises:
        KeyError: If no pipeline has that name
    """
    try:
        cls = PIPELINE_REGISTRY[name]
    except KeyError:
        available = ", ".join(PIPELINE_REGISTRY)
        raise KeyError(f"Unknown pipeline '{name}'. Available: {available}") from None
    return cls()


async def run_pipeline(
    name: str,
    date_override: Optional[date] = None,
    season_id: Optional[int] = None,
) -> PipelineResult:
    return await get_pipeline(name).run(date_override=date_override, season_id=season_id)


async def run_season_aggregation(
    season_id: Optional[int] = None,
    date_override: Optional[date] = None,
) -> SeasonAggregationResult:
    """
    Run weekly roll-up, matchup results and standings in order.

    Stops at the first failed step; later steps would read stale inputs.
    Without a season id each step resolves the season of ``date_override``
    (or of the scrape target date).
    """
    log = get_logger("pipeline").bind(operation="season_aggregation", season_id=season_id)
    results: dict[str, PipelineResult] = {}
    status = ApiStatus.SUCCESS
    total = len(SEASON_AGGREGATION_PIPELINE_NAMES)

    log.info("season_aggregation_started", steps=SEASON_AGGREGATION_PIPELINE_NAMES)
    for step, name in enumerate(SEASON_AGGREGATION_PIPELINE_NAMES, 1):
        log.info("running_pipeline", pipeline=name, step=f"{step}/{total}")
        result = await run_pipeline(name, date_override=date_override, season_id=season_id)
        results[name] = result
        if result.failed:
            status = ApiStatus.ERROR
            log.error("season_aggregation_stopped", failed_pipeline=name)
            break

    log.info(
        "season_aggregation_completed",
        status=status.value,
        completed=sum(1 for r in results.values() if not r.failed),
        total=total,
    )
    return SeasonAggregationResult(status=status, season_id=season_id, results=results)


def list_pipelines() -> list[dict]:
    return [cls.get_info() for cls in PIPELINE_REGISTRY.values()]


__all__ = [
    "BasePipeline",
    "PipelineConfig",
    "PipelineContext",
    "PlayerDaysPipeline",
    "PlayerDayCorrectionsPipeline",
    "WeeklyRollupPipeline",
    "MatchupResultsPipeline",
    "TeamSeasonStandingsPipeline",
    "PIPELINE_REGISTRY",
    "SEASON_AGGREGATION_PIPELINE_NAMES",
    "get_pipeline",
    "run_pipeline",
    "run_season_aggregation",
    "list_pipelines",
]
