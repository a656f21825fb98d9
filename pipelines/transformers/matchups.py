"""
Matchup Resolver

Scores a head-to-head week category by category and decides the result.

Goalie-only categories are only contested by teams that reached the
goalie-start minimum; a lone eligible team takes them outright. Scores are
always written; win flags only once the week is complete.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping, Optional

from core.exceptions import PartialDataWarning
from pipelines.transformers.categories import (
    GOALIE_POS_GROUP,
    CategoryRule,
    matchup_categories,
)
from pipelines.transformers.stat_values import as_number

HOME = "home"
AWAY = "away"


@dataclass
class MatchupOutcome:
    """
    Result of scoring one matchup.

    Attributes:
        home_score / away_score: Categories won by each side
        home_win / away_win: None until the week is complete
        category_winners: field -> "home", "away" or None (no point)
    """

    home_score: int = 0
    away_score: int = 0
    home_win: Optional[bool] = None
    away_win: Optional[bool] = None
    category_winners: dict[str, Optional[str]] = field(default_factory=dict)

    def as_update(self) -> dict:
        return {
            "home_score": self.home_score,
            "away_score": self.away_score,
            "home_win": self.home_win,
            "away_win": self.away_win,
        }


def goalie_starts(player_week_rows: Iterable[Mapping[str, Any]], team_id: Any) -> float:
    """Sum of gs over a team's goalie player-week rows."""
    return sum(
        as_number(row.get("gs"))
        for row in player_week_rows
        if str(row.get("team_id")) == str(team_id)
        and row.get("pos_group") == GOALIE_POS_GROUP
    )


def category_winner(
    rule: CategoryRule,
    home_stats: Mapping[str, Any],
    away_stats: Mapping[str, Any],
    home_eligible: bool,
    away_eligible: bool,
) -> Optional[str]:
    """
    Decide one category.

    Returns "home", "away", or None when the category is skipped or tied.
    """
    if rule.goalie_only:
        if not home_eligible and not away_eligible:
            return None
        if home_eligible != away_eligible:
            return HOME if home_eligible else AWAY

    home_value = as_number(home_stats.get(rule.field))
    away_value = as_number(away_stats.get(rule.field))
    if home_value == away_value:
        return None
    home_better = home_value > away_value if rule.higher_better else home_value < away_value
    return HOME if home_better else AWAY


def resolve_matchup(
    home_stats: Mapping[str, Any],
    away_stats: Mapping[str, Any],
    season_id: int,
    home_goalie_starts: float,
    away_goalie_starts: float,
    week_complete: bool,
    goalie_start_minimum: int,
    home_wins_ties: bool = True,
) -> MatchupOutcome:
    """
    Score a matchup from the two teams' week stat lines.

    Args:
        home_stats / away_stats: Team-week stat lines
        season_id: Season, selects the active category rules
        home_goalie_starts / away_goalie_starts: Goalie starts this week
        week_complete: Whether win flags may be decided
        goalie_start_minimum: Starts needed to contest goalie categories
        home_wins_ties: A tied score counts as a home win

    Returns:
        MatchupOutcome with scores, win flags and per-category winners
    """
    home_eligible = home_goalie_starts >= goalie_start_minimum
    away_eligible = away_goalie_starts >= goalie_start_minimum

    outcome = MatchupOutcome()
    for rule in matchup_categories(season_id):
        winner = category_winner(rule, home_stats, away_stats, home_eligible, away_eligible)
        outcome.category_winners[rule.field] = winner
        if winner == HOME:
            outcome.home_score += 1
        elif winner == AWAY:
            outcome.away_score += 1

    if week_complete:
        if home_wins_ties:
            outcome.home_win = outcome.home_score >= outcome.away_score
        else:
            outcome.home_win = outcome.home_score > outcome.away_score
        outcome.away_win = outcome.away_score > outcome.home_score

    return outcome


def score_matchup(
    matchup: Mapping[str, Any],
    week: Any,
    team_weeks: Mapping[str, Mapping[str, Any]],
    player_weeks: list[Mapping[str, Any]],
    today: date,
    goalie_start_minimum: int,
    home_wins_ties: bool = True,
) -> MatchupOutcome:
    """
    Score a stored matchup shell from memoized week lookups.

    Args:
        matchup: Matchup row
        week: The matchup's Week
        team_weeks: TeamWeek rows for the week keyed by str(team_id)
        player_weeks: PlayerWeek rows for the week
        today: League-local date used for the completeness check

    Raises:
        PartialDataWarning: Either team has no team-week line yet
    """
    home_id = str(matchup["home_team_id"])
    away_id = str(matchup["away_team_id"])
    missing = [team_id for team_id in (home_id, away_id) if team_id not in team_weeks]
    if missing:
        raise PartialDataWarning(
            "team week stats missing",
            matchup_id=matchup.get("id"),
            week_id=week.id,
            missing_team_ids=missing,
        )

    return resolve_matchup(
        home_stats=team_weeks[home_id],
        away_stats=team_weeks[away_id],
        season_id=week.season_id,
        home_goalie_starts=goalie_starts(player_weeks, home_id),
        away_goalie_starts=goalie_starts(player_weeks, away_id),
        week_complete=week.is_complete_on(today),
        goalie_start_minimum=goalie_start_minimum,
        home_wins_ties=home_wins_ties,
    )
