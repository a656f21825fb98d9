"""
Team Season Standings Pipeline

Rolls team-week lines into team-season lines per season type and attaches
the standings record (wins, tie-break results, streak, points, ranks).
"""

from collections import defaultdict
from typing import Any

from db.models import Matchup, PlayerWeekStatLine, TeamSeasonStatLine, TeamWeekStatLine, Week
from db.store import fetch_records, upsert_by_keys
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.transformers.standings import assign_ranks, build_team_season
from pipelines.transformers.stat_values import as_number
from services.collaborators import load_rater
from services.season_context import resolve_season

TEAM_SEASON_KEYS = ["team_id", "season_id", "season_type"]


class TeamSeasonStandingsPipeline(BasePipeline):
    """
    Build season totals and standings for every team.

    One line per (team, season type); regular season, playoffs and the
    losers tournament are ranked separately. Only matchups with a decided
    result count toward the record.
    """

    config = PipelineConfig(
        name="team_season_standings",
        display_name="Team Season Standings",
        description="Season totals, records, streaks and ranks per team",
        writes=("team_season_stat_lines",),
        season_scoped=True,
        depends_on=("weekly_rollup", "matchup_results"),
    )

    def __init__(self, rater: Any = None):
        super().__init__()
        self._rater = rater

    def before_execute(self, ctx: PipelineContext) -> None:
        self.rater = load_rater(self._rater)

    def execute(self, ctx: PipelineContext) -> None:
        """Execute the standings build."""
        if ctx.season_id is not None:
            season_ctx = resolve_season(season_id=ctx.season_id)
        else:
            season_ctx = resolve_season(target_date=ctx.target_date)
        season_id = season_ctx.season_id

        weeks = Week.for_season(season_id)
        week_type = {week.id: week.week_type for week in weeks}
        week_order = {week.id: index for index, week in enumerate(weeks)}

        team_weeks_by_type: dict[str, dict[str, list[dict]]] = defaultdict(lambda: defaultdict(list))
        for row in fetch_records(TeamWeekStatLine, season_id=season_id):
            season_type = week_type.get(row["week_id"])
            if season_type:
                team_weeks_by_type[season_type][str(row["team_id"])].append(row)

        matchups_by_type: dict[str, list[dict]] = defaultdict(list)
        decided = [
            row
            for row in fetch_records(Matchup, season_id=season_id)
            if row["home_win"] is not None or row["away_win"] is not None
        ]
        decided.sort(key=lambda row: week_order.get(row["week_id"], len(week_order)))
        for row in decided:
            season_type = week_type.get(row["week_id"])
            if season_type:
                matchups_by_type[season_type].append(row)

        players_used: dict[tuple[str, str], set] = defaultdict(set)
        for row in fetch_records(PlayerWeekStatLine, season_id=season_id):
            if as_number(row.get("gs")) > 0:
                players_used[(str(row["team_id"]), row["season_type"])].add(row["player_id"])

        conf_by_team = season_ctx.conf_by_team
        lines: list[dict] = []
        for season_type, team_weeks in team_weeks_by_type.items():
            type_lines = [
                build_team_season(
                    team_id=rows[0]["team_id"],
                    season_id=season_id,
                    season_type=season_type,
                    team_weeks=rows,
                    matchups=matchups_by_type.get(season_type, []),
                    conf_by_team=conf_by_team,
                    players_used=len(players_used.get((team_id, season_type), ())),
                    rater=self.rater,
                )
                for team_id, rows in team_weeks.items()
            ]
            lines.extend(assign_ranks(type_lines, conf_by_team))

        ctx.log.info(
            "standings_built",
            season_id=season_id,
            season_types=sorted(team_weeks_by_type),
            lines=len(lines),
            decided_matchups=len(decided),
        )

        ctx.record_write(upsert_by_keys(TeamSeasonStatLine, TEAM_SEASON_KEYS, lines))
        ctx.raise_for_persistence()
