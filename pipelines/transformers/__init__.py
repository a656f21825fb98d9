"""
Data Transformers

Pure functions turning roster rows and stat lines into derived stat lines.
"""

from pipelines.transformers.categories import (
    CATEGORY_RULES,
    STAT_ERA_RULES,
    CategoryRule,
    SeasonRange,
    is_stat_enabled,
    matchup_categories,
)
from pipelines.transformers.matchups import MatchupOutcome, resolve_matchup, score_matchup
from pipelines.transformers.rating import rate_record
from pipelines.transformers.roster import build_roster_entries, optimize_lineup
from pipelines.transformers.standings import assign_ranks, build_team_season
from pipelines.transformers.stat_values import StatValue, parse_stat, sum_nullable
from pipelines.transformers.team_day import build_team_day
from pipelines.transformers.weekly import build_player_weeks, build_team_weeks

__all__ = [
    "CATEGORY_RULES",
    "STAT_ERA_RULES",
    "CategoryRule",
    "SeasonRange",
    "is_stat_enabled",
    "matchup_categories",
    "MatchupOutcome",
    "resolve_matchup",
    "score_matchup",
    "rate_record",
    "build_roster_entries",
    "optimize_lineup",
    "assign_ranks",
    "build_team_season",
    "StatValue",
    "parse_stat",
    "sum_nullable",
    "build_team_day",
    "build_player_weeks",
    "build_team_weeks",
]
