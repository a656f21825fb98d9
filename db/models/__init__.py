# Import all models to ensure they are registered with the database
from .pipeline_run import PipelineRun
from .league import Season, Week, Team, Player, Matchup
from .stats import (
    PlayerDayStatLine,
    TeamDayStatLine,
    PlayerWeekStatLine,
    PlayerSplitStatLine,
    PlayerTotalStatLine,
    TeamWeekStatLine,
    TeamSeasonStatLine,
)

__all__ = [
    "PipelineRun",
    "Season",
    "Week",
    "Team",
    "Player",
    "Matchup",
    "PlayerDayStatLine",
    "TeamDayStatLine",
    "PlayerWeekStatLine",
    "PlayerSplitStatLine",
    "PlayerTotalStatLine",
    "TeamWeekStatLine",
    "TeamSeasonStatLine",
]
