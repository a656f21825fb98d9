"""
Player Day Corrections Pipeline

Morning catch-up for late stat corrections. Re-fetches rosters for an
already scraped date, overlays corrected category values on the stored
player-day rows, inserts rows for rostered players the first scrape
missed, re-rates them and recomputes the team days. Starts, lineup slots
and roster flags of stored rows are left as originally scraped.
"""

from datetime import date
from typing import Any

from core.exceptions import ConfigurationError
from db.models import PlayerDayStatLine, TeamDayStatLine
from db.store import fetch_records, upsert_by_keys
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.player_days import PLAYER_DAY_KEYS, TEAM_DAY_KEYS
from pipelines.transformers.rating import ensure_ratings
from pipelines.transformers.roster import (
    build_roster_entries,
    merge_correction,
    player_team_key,
)
from pipelines.transformers.team_day import build_team_day
from services.collaborators import load_rater, load_roster_source
from services.schedule_service import previous_day
from services.season_context import resolve_season_context


class PlayerDayCorrectionsPipeline(BasePipeline):
    """
    Apply late stat corrections to one date and rebuild its team days.

    Defaults to the day before the current scrape target. Refreshed roster
    rows are matched to stored rows by (player, team). Stored rows the
    source no longer lists keep their values; listed players with no
    stored row are inserted with blank lineup slots and flags, since the
    lineup optimizer does not run on a correction pass.
    """

    config = PipelineConfig(
        name="player_day_corrections",
        display_name="Player Day Corrections",
        description="Re-scrapes a past date and applies late stat corrections",
        writes=("player_day_stat_lines", "team_day_stat_lines"),
        depends_on=("player_days",),
    )

    def __init__(self, roster_source: Any = None, rater: Any = None):
        super().__init__()
        self._roster_source = roster_source
        self._rater = rater

    def before_execute(self, ctx: PipelineContext) -> None:
        self.roster_source = load_roster_source(self._roster_source)
        self.rater = load_rater(self._rater)

    def correction_date(self, ctx: PipelineContext) -> date:
        if ctx.date_override:
            return ctx.date_override
        return previous_day(ctx.target_date)

    def execute(self, ctx: PipelineContext) -> None:
        """Execute the corrections pass."""
        target_date = self.correction_date(ctx)
        season_ctx = resolve_season_context(target_date)

        stored = fetch_records(PlayerDayStatLine, date=target_date)
        if not stored:
            raise ConfigurationError(
                f"No player days stored for {target_date.isoformat()}; run player_days first"
            )

        stored_by_key = {
            player_team_key(row["player_id"], row["team_id"]): row for row in stored
        }
        previous_keys = {
            player_team_key(row["player_id"], row["team_id"])
            for row in fetch_records(PlayerDayStatLine, date=previous_day(target_date))
        }

        corrected_rows: list[dict] = []
        team_rows: list[dict] = []
        inserted = 0
        for team in season_ctx.teams:
            try:
                raw_rows = self.roster_source.fetch_roster(
                    team, target_date, season_ctx.season_id
                )
            except Exception as e:
                ctx.log.warning(
                    "correction_fetch_failed",
                    team_id=team.id,
                    date=target_date.isoformat(),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            team_rows_by_key = {
                key: dict(row) for key, row in stored_by_key.items() if key[1] == str(team.id)
            }
            missing_raw = []
            for raw in raw_rows:
                if not raw:
                    continue
                player = season_ctx.players_by_yahoo_id.get(str(raw.get("yahooId", "")).strip())
                if player is None:
                    continue
                key = player_team_key(player.id, team.id)
                if key in team_rows_by_key:
                    team_rows_by_key[key] = merge_correction(team_rows_by_key[key], raw)
                else:
                    missing_raw.append(raw)

            team_corrected = list(team_rows_by_key.values())
            if missing_raw:
                added = build_roster_entries(
                    missing_raw,
                    team_id=team.id,
                    season_id=season_ctx.season_id,
                    week_id=season_ctx.week_id,
                    target_date=target_date,
                    players_by_yahoo_id=season_ctx.players_by_yahoo_id,
                    previous_day_keys=previous_keys,
                    existing_ids={},
                )
                for entry in added:
                    ctx.log.info(
                        "player_day_inserted",
                        player_id=entry["player_id"],
                        team_id=team.id,
                        date=target_date.isoformat(),
                    )
                inserted += len(added)
                team_corrected.extend(added)

            ensure_ratings(team_corrected, self.rater)
            corrected_rows.extend(team_corrected)
            team_rows.append(
                build_team_day(
                    team_corrected,
                    team_id=team.id,
                    season_id=season_ctx.season_id,
                    week_id=season_ctx.week_id,
                    target_date=target_date,
                    rater=self.rater,
                )
            )

        ctx.log.info(
            "corrections_built",
            date=target_date.isoformat(),
            player_rows=len(corrected_rows),
            team_rows=len(team_rows),
            inserted=inserted,
        )

        ctx.record_write(upsert_by_keys(PlayerDayStatLine, PLAYER_DAY_KEYS, corrected_rows))
        ctx.record_write(upsert_by_keys(TeamDayStatLine, TEAM_DAY_KEYS, team_rows))
        ctx.raise_for_persistence()
