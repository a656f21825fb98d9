"""
Matchup Results Pipeline

Scores every matchup of a week from the team-week lines and decides the
result once the week is complete. Matchups missing a side's team-week
line are left unresolved for a later run.
"""

from core.exceptions import PartialDataWarning
from core.settings import settings
from db.models import Matchup, PlayerWeekStatLine, TeamWeekStatLine
from db.store import fetch_records, upsert_by_keys
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.transformers.matchups import score_matchup
from services.season_context import resolve_weeks


class MatchupResultsPipeline(BasePipeline):
    """
    Score matchups category by category.

    Scores are written as running tallies for in-progress weeks; home_win
    and away_win are only set once the week is complete. Re-running on
    unchanged inputs writes the same values.
    """

    config = PipelineConfig(
        name="matchup_results",
        display_name="Matchup Results",
        description="Scores head-to-head matchups from team-week lines",
        writes=("matchups",),
        depends_on=("weekly_rollup",),
    )

    def execute(self, ctx: PipelineContext) -> None:
        """Execute matchup scoring."""
        season_ctx, weeks = resolve_weeks(ctx.target_date, ctx.season_id, today=ctx.today)
        updates: list[dict] = []
        skipped = 0

        for week in weeks:
            matchups = fetch_records(Matchup, week_id=week.id)
            if not matchups:
                continue

            team_weeks = {
                str(row["team_id"]): row
                for row in fetch_records(TeamWeekStatLine, week_id=week.id)
            }
            player_weeks = fetch_records(PlayerWeekStatLine, week_id=week.id)

            for matchup in matchups:
                try:
                    outcome = score_matchup(
                        matchup,
                        week,
                        team_weeks,
                        player_weeks,
                        today=ctx.today,
                        goalie_start_minimum=settings.goalie_start_minimum,
                        home_wins_ties=settings.home_wins_ties,
                    )
                except PartialDataWarning as e:
                    skipped += 1
                    ctx.log.warning("matchup_skipped_missing_stats", **e.context)
                    continue

                updates.append({"id": matchup["id"], **outcome.as_update()})
                ctx.log.debug(
                    "matchup_scored",
                    matchup_id=matchup["id"],
                    week_id=week.id,
                    home_score=outcome.home_score,
                    away_score=outcome.away_score,
                    home_win=outcome.home_win,
                    away_win=outcome.away_win,
                )

        ctx.log.info(
            "matchups_scored",
            season_id=season_ctx.season_id,
            scored=len(updates),
            skipped=skipped,
        )

        ctx.record_write(upsert_by_keys(Matchup, ["id"], updates))
        ctx.raise_for_persistence()
