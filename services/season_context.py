"""
Season Context Resolver

Looks up everything a run needs for a target date or season once, up
front: the season, the week, the season's teams and the active player
lookup. A date outside any season or week is a configuration problem and
aborts the run.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from core.exceptions import ConfigurationError
from db.models import Player, Season, Team, Week


@dataclass
class SeasonContext:
    """Memoized league lookups for one run."""

    season: Season
    week: Optional[Week]
    teams: list[Team] = field(default_factory=list)
    players_by_yahoo_id: dict[str, Player] = field(default_factory=dict)

    @property
    def season_id(self) -> int:
        return self.season.id

    @property
    def week_id(self) -> Optional[int]:
        return self.week.id if self.week else None

    @property
    def conf_by_team(self) -> dict[str, Optional[int]]:
        return {str(team.id): team.conf_id for team in self.teams}


def resolve_season_context(target_date: date, load_players: bool = True) -> SeasonContext:
    """
    Resolve the season, week, teams and players for a date.

    Raises:
        ConfigurationError: No season or no week covers the date
    """
    season = Season.get_for_date(target_date)
    if season is None:
        raise ConfigurationError(f"No season covers {target_date.isoformat()}")

    week = Week.get_for_date(target_date, season_id=season.id)
    if week is None:
        raise ConfigurationError(
            f"No week of season {season.id} covers {target_date.isoformat()}"
        )

    return SeasonContext(
        season=season,
        week=week,
        teams=Team.for_season(season.id),
        players_by_yahoo_id=Player.active_by_yahoo_id() if load_players else {},
    )


def resolve_season(season_id: Optional[int] = None, target_date: Optional[date] = None) -> SeasonContext:
    """
    Resolve a whole season, by id or by a date inside it.

    Raises:
        ConfigurationError: The season does not exist
    """
    if season_id is not None:
        season = Season.get_or_none(Season.id == season_id)
        if season is None:
            raise ConfigurationError(f"Season {season_id} does not exist")
    elif target_date is not None:
        season = Season.get_for_date(target_date)
        if season is None:
            raise ConfigurationError(f"No season covers {target_date.isoformat()}")
    else:
        raise ConfigurationError("A season id or a date is required")

    return SeasonContext(season=season, week=None, teams=Team.for_season(season.id))


def resolve_weeks(
    target_date: date,
    season_id: Optional[int] = None,
    today: Optional[date] = None,
) -> tuple[SeasonContext, list[Week]]:
    """
    Weeks a roll-up run should cover.

    With a season id: every week of that season that has started by today.
    Otherwise: the single week containing target_date.
    """
    if season_id is None:
        context = resolve_season_context(target_date, load_players=False)
        return context, [context.week]

    context = resolve_season(season_id=season_id)
    weeks = [
        week
        for week in Week.for_season(season_id)
        if today is None or week.start_date <= today
    ]
    return context, weeks
