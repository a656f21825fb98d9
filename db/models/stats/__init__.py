"""
Derived Stat Line Tables

Day, week and season aggregates for players and teams. All of these are
recomputed by the pipelines and written with upsert_by_keys.
"""

from db.models.stats.base import StatLineModel
from db.models.stats.player_day import PlayerDayStatLine
from db.models.stats.team_day import TeamDayStatLine
from db.models.stats.player_week import PlayerWeekStatLine
from db.models.stats.player_season import PlayerSplitStatLine, PlayerTotalStatLine
from db.models.stats.team_week import TeamWeekStatLine
from db.models.stats.team_season import TeamSeasonStatLine

__all__ = [
    "StatLineModel",
    "PlayerDayStatLine",
    "TeamDayStatLine",
    "PlayerWeekStatLine",
    "PlayerSplitStatLine",
    "PlayerTotalStatLine",
    "TeamWeekStatLine",
    "TeamSeasonStatLine",
]
