"""
Player Days Pipeline

The scrape cycle: fetches every team's roster for the target date, builds
player-day lines (adds, lineup flags, ratings) and the team-day aggregate,
and writes both. Players no longer on a processed team's roster for the
date are deleted.
"""

from typing import Any, Optional

from core.exceptions import ExternalFunctionFailure, PipelineError
from core.settings import settings
from db.models import PlayerDayStatLine, TeamDayStatLine
from db.store import fetch_records, upsert_by_keys
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.transformers.rating import ensure_ratings
from pipelines.transformers.roster import (
    build_roster_entries,
    optimize_lineup,
    player_team_key,
)
from pipelines.transformers.team_day import build_team_day
from services.collaborators import (
    load_lineup_optimizer,
    load_rater,
    load_roster_source,
)
from services.schedule_service import previous_day, should_skip_scrape_window
from services.season_context import SeasonContext, resolve_season_context

PLAYER_DAY_KEYS = ["player_id", "team_id", "date"]
TEAM_DAY_KEYS = ["team_id", "date"]


class PlayerDaysPipeline(BasePipeline):
    """
    Scrape rosters and write player-day and team-day lines for one date.

    This pipeline:
    1. Skips scheduled runs inside idle scrape windows
    2. Resolves the season, week, teams and player lookup for the date
    3. Fetches each team's roster (retry + circuit breaker)
    4. Builds player-day entries, runs the lineup optimizer, rates players
    5. Aggregates each team's lineup into a team-day line
    6. Upserts player days (deleting dropped players) and team days

    A team whose roster fetch fails is skipped and its stored rows are left
    untouched. Write errors fail the run after every write was attempted.
    """

    config = PipelineConfig(
        name="player_days",
        display_name="Player Days",
        description="Scrapes team rosters and writes player-day and team-day stat lines",
        writes=("player_day_stat_lines", "team_day_stat_lines"),
    )

    def __init__(
        self,
        roster_source: Any = None,
        lineup_optimizer: Any = None,
        rater: Any = None,
    ):
        super().__init__()
        self._roster_source = roster_source
        self._lineup_optimizer = lineup_optimizer
        self._rater = rater

    def before_execute(self, ctx: PipelineContext) -> None:
        """Resolve collaborators; a missing one fails the run."""
        self.roster_source = load_roster_source(self._roster_source)
        self.lineup_optimizer = load_lineup_optimizer(self._lineup_optimizer)
        self.rater = load_rater(self._rater)

    def execute(self, ctx: PipelineContext) -> None:
        """Execute the scrape cycle."""
        if (
            ctx.date_override is None
            and settings.enforce_scrape_windows
            and should_skip_scrape_window(ctx.started_at)
        ):
            ctx.skip("idle scrape window")
            return

        target_date = ctx.target_date
        season_ctx = resolve_season_context(target_date)
        ctx.log.info(
            "scrape_started",
            date=target_date.isoformat(),
            season_id=season_ctx.season_id,
            week_id=season_ctx.week_id,
            teams=len(season_ctx.teams),
        )

        # Memoized lookups for the whole run
        previous_keys = {
            player_team_key(row["player_id"], row["team_id"])
            for row in fetch_records(PlayerDayStatLine, date=previous_day(target_date))
        }
        existing_ids = {
            player_team_key(row["player_id"], row["team_id"]): row["id"]
            for row in fetch_records(PlayerDayStatLine, date=target_date)
        }

        player_rows: list[dict] = []
        team_rows: list[dict] = []
        processed_team_ids: list[int] = []

        for team in season_ctx.teams:
            try:
                entries = self._build_team_entries(
                    ctx, season_ctx, team, previous_keys, existing_ids
                )
            except PipelineError as e:
                ctx.log.warning(
                    "team_day_skipped",
                    team_id=team.id,
                    date=target_date.isoformat(),
                    error=str(e),
                    error_type=type(e).__name__,
                    circuit_open=getattr(self.roster_source, "is_open", False),
                )
                continue

            player_rows.extend(entries)
            team_rows.append(
                build_team_day(
                    entries,
                    team_id=team.id,
                    season_id=season_ctx.season_id,
                    week_id=season_ctx.week_id,
                    target_date=target_date,
                    rater=self.rater,
                )
            )
            processed_team_ids.append(team.id)

        ctx.log.info(
            "team_days_built",
            date=target_date.isoformat(),
            teams_processed=len(processed_team_ids),
            teams_skipped=len(season_ctx.teams) - len(processed_team_ids),
            player_rows=len(player_rows),
        )

        delete_scope: Optional[dict] = None
        if processed_team_ids:
            delete_scope = {"date": target_date, "team_id": processed_team_ids}

        ctx.record_write(
            upsert_by_keys(
                PlayerDayStatLine, PLAYER_DAY_KEYS, player_rows, delete_missing=delete_scope
            )
        )
        ctx.record_write(upsert_by_keys(TeamDayStatLine, TEAM_DAY_KEYS, team_rows))
        ctx.raise_for_persistence()

    def _build_team_entries(
        self,
        ctx: PipelineContext,
        season_ctx: SeasonContext,
        team: Any,
        previous_keys: set,
        existing_ids: dict,
    ) -> list[dict]:
        """Fetch, resolve, optimize and rate one team's roster."""
        target_date = ctx.target_date
        try:
            raw_rows = self.roster_source.fetch_roster(team, target_date, season_ctx.season_id)
        except Exception as e:
            raise ExternalFunctionFailure(
                "roster_source", str(e), team_id=team.id, date=target_date.isoformat()
            ) from e

        entries = build_roster_entries(
            raw_rows,
            team_id=team.id,
            season_id=season_ctx.season_id,
            week_id=season_ctx.week_id,
            target_date=target_date,
            players_by_yahoo_id=season_ctx.players_by_yahoo_id,
            previous_day_keys=previous_keys,
            existing_ids=existing_ids,
        )
        entries = optimize_lineup(entries, self.lineup_optimizer, team.id, target_date)
        ensure_ratings(entries, self.rater)
        return entries
