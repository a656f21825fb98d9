"""
Weekly Roll-up Pipeline

Rolls stored player-day and team-day lines into player-week and team-week
lines, then the season's player weeks into split and total lines. Runs for
the week of the target date, or for every started week of a season when a
season id is given; season lines always cover every stored week.
"""

from typing import Any

from db.models import (
    PlayerDayStatLine,
    PlayerSplitStatLine,
    PlayerTotalStatLine,
    PlayerWeekStatLine,
    TeamDayStatLine,
    TeamWeekStatLine,
)
from db.store import fetch_records, upsert_by_keys
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.transformers.weekly import (
    build_player_seasons,
    build_player_weeks,
    build_team_weeks,
)
from services.collaborators import load_rater
from services.season_context import resolve_weeks

PLAYER_WEEK_KEYS = ["player_id", "week_id", "team_id"]
TEAM_WEEK_KEYS = ["team_id", "week_id"]
PLAYER_SPLIT_KEYS = ["player_id", "team_id", "season_id", "season_type"]
PLAYER_TOTAL_KEYS = ["player_id", "season_id", "season_type"]


class WeeklyRollupPipeline(BasePipeline):
    """
    Build player-week and team-week lines from day lines, then player
    split and total lines from the season's player weeks.

    Player weeks that no longer have any day rows (a player moved off a
    team mid-week and the days were re-scraped) are deleted, scoped to the
    week being rebuilt. Season lines are deleted the same way, scoped to
    the season.
    """

    config = PipelineConfig(
        name="weekly_rollup",
        display_name="Weekly Roll-up",
        description="Rolls player and team days into week lines and player season lines",
        writes=(
            "player_week_stat_lines",
            "team_week_stat_lines",
            "player_split_stat_lines",
            "player_total_stat_lines",
        ),
        depends_on=("player_days",),
    )

    def __init__(self, rater: Any = None):
        super().__init__()
        self._rater = rater

    def before_execute(self, ctx: PipelineContext) -> None:
        self.rater = load_rater(self._rater)

    def execute(self, ctx: PipelineContext) -> None:
        """Execute the weekly roll-up."""
        season_ctx, weeks = resolve_weeks(ctx.target_date, ctx.season_id, today=ctx.today)
        ctx.log.info(
            "weekly_rollup_started",
            season_id=season_ctx.season_id,
            weeks=[week.id for week in weeks],
        )

        for week in weeks:
            player_days = fetch_records(PlayerDayStatLine, week_id=week.id)
            team_days = fetch_records(TeamDayStatLine, week_id=week.id)

            player_weeks = build_player_weeks(player_days, week, self.rater)
            team_weeks = build_team_weeks(team_days, week, self.rater)

            ctx.log.info(
                "week_rolled_up",
                week_id=week.id,
                player_days=len(player_days),
                player_weeks=len(player_weeks),
                team_weeks=len(team_weeks),
                complete=week.is_complete_on(ctx.today),
            )

            ctx.record_write(
                upsert_by_keys(
                    PlayerWeekStatLine,
                    PLAYER_WEEK_KEYS,
                    player_weeks,
                    delete_missing={"week_id": week.id},
                )
            )
            ctx.record_write(upsert_by_keys(TeamWeekStatLine, TEAM_WEEK_KEYS, team_weeks))

        self.roll_up_season(ctx, season_ctx.season_id)
        ctx.raise_for_persistence()

    def roll_up_season(self, ctx: PipelineContext, season_id: int) -> None:
        """Rebuild split and total lines from every stored week of the season."""
        player_weeks = fetch_records(PlayerWeekStatLine, season_id=season_id)
        splits, totals = build_player_seasons(player_weeks, self.rater)
        ctx.log.info(
            "player_season_rolled_up",
            season_id=season_id,
            player_weeks=len(player_weeks),
            splits=len(splits),
            totals=len(totals),
        )
        scope = {"season_id": season_id}
        ctx.record_write(
            upsert_by_keys(PlayerSplitStatLine, PLAYER_SPLIT_KEYS, splits, delete_missing=scope)
        )
        ctx.record_write(
            upsert_by_keys(PlayerTotalStatLine, PLAYER_TOTAL_KEYS, totals, delete_missing=scope)
        )
