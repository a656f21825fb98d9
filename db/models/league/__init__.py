"""
League Dimension Tables

Seasons, weeks, teams, players and the matchup schedule. These rows are
maintained by league admins; the pipelines read them and only ever write
scores and results back onto Matchup.
"""

from db.models.league.seasons import Season
from db.models.league.weeks import Week, SeasonType
from db.models.league.teams import Team
from db.models.league.players import Player
from db.models.league.matchups import Matchup

__all__ = [
    "Season",
    "Week",
    "SeasonType",
    "Team",
    "Player",
    "Matchup",
]
