"""
Team-Season Standings

Season (per season type) totals for each team plus its standings record:
wins and losses from decided matchups, home tie-break wins/losses, the
conference split, the current streak, standings points and ranks.
"""

from typing import Any, Iterable, Mapping, Optional

from pipelines.transformers.categories import SUMMED_FIELDS
from pipelines.transformers.rating import rate_record
from pipelines.transformers.stat_values import apply_goalie_ratios, sum_nullable
from services.collaborators import Rater

WIN = "W"
LOSS = "L"

# Teams ranked past this spot in their conference enter the wildcard race
CONFERENCE_PLAYOFF_SPOTS = 3

RECORD_FIELDS: tuple[str, ...] = (
    "team_w",
    "team_hw",
    "team_hl",
    "team_l",
    "team_ccw",
    "team_cchw",
    "team_cchl",
    "team_ccl",
)


def matchup_result(team_id: Any, matchup: Mapping[str, Any]) -> tuple[Optional[str], bool]:
    """
    A decided matchup from one team's side.

    Returns:
        ("W" | "L" | None, decided_by_home_tie_break)
    """
    is_home = str(matchup.get("home_team_id")) == str(team_id)
    home_win = matchup.get("home_win")
    away_win = matchup.get("away_win")
    home_score = matchup.get("home_score")
    away_score = matchup.get("away_score")
    tied = home_score is not None and away_score is not None and home_score == away_score

    if is_home:
        if home_win:
            return WIN, tied
        if away_win:
            return LOSS, False
    else:
        if away_win:
            return WIN, False
        if home_win:
            return LOSS, tied
    return None, False


def compute_streak(results: list[str]) -> str:
    """
    Current run of identical results, e.g. "3W".

    Examples:
        >>> compute_streak(["W", "L", "L"])
        '2L'
        >>> compute_streak([])
        ''
    """
    if not results:
        return ""
    last = results[-1]
    count = 0
    for result in reversed(results):
        if result != last:
            break
        count += 1
    return f"{count}{last}"


def team_record(
    team_id: Any,
    matchups: Iterable[Mapping[str, Any]],
    conf_by_team: Mapping[str, Any],
) -> dict:
    """
    Win/loss record and streak for one team.

    Args:
        team_id: Team to compute the record for
        matchups: Matchups of the season type in week order
        conf_by_team: Conference id keyed by str(team_id)

    Returns:
        Dict of RECORD_FIELDS counts plus "streak"
    """
    record = {field: 0 for field in RECORD_FIELDS}
    results: list[str] = []
    team_conf = conf_by_team.get(str(team_id))

    for matchup in matchups:
        home_id = str(matchup.get("home_team_id"))
        away_id = str(matchup.get("away_team_id"))
        if str(team_id) not in (home_id, away_id):
            continue
        result, tie_break = matchup_result(team_id, matchup)
        if result is None:
            continue

        opponent_id = away_id if home_id == str(team_id) else home_id
        opponent_conf = conf_by_team.get(opponent_id)
        conference_game = team_conf is not None and team_conf == opponent_conf

        if result == WIN:
            record["team_w"] += 1
            record["team_ccw"] += conference_game
            record["team_hw"] += tie_break
            record["team_cchw"] += tie_break and conference_game
        else:
            record["team_l"] += 1
            record["team_ccl"] += conference_game
            record["team_hl"] += tie_break
            record["team_cchl"] += tie_break and conference_game
        results.append(result)

    record["streak"] = compute_streak(results)
    return record


def standings_points(record: Mapping[str, Any]) -> int:
    """3 per outright win, 2 per tie-break win, 1 per tie-break loss."""
    wins = int(record.get("team_w") or 0)
    hw = int(record.get("team_hw") or 0)
    hl = int(record.get("team_hl") or 0)
    return 3 * (wins - hw) + 2 * hw + hl


def _rank_key(line: Mapping[str, Any]) -> tuple:
    team_id = line.get("team_id")
    return (-line["points"], -int(line.get("team_w") or 0), str(team_id))


def assign_ranks(lines: list[dict], conf_by_team: Mapping[str, Any]) -> list[dict]:
    """
    Set overall, conference and wildcard ranks on one season type's lines.

    Ordering is points, then wins, then team id. Teams outside their
    conference's top spots are ranked again for the wildcard.
    """
    for line in lines:
        line["points"] = standings_points(line)

    ordered = sorted(lines, key=_rank_key)
    conferences: dict[Any, list[dict]] = {}
    for rank, line in enumerate(ordered, start=1):
        line["overall_rk"] = rank
        line["conference_rk"] = None
        line["wildcard_rk"] = None
        conf = conf_by_team.get(str(line.get("team_id")))
        if conf is not None:
            conferences.setdefault(conf, []).append(line)

    for bucket in conferences.values():
        for rank, line in enumerate(bucket, start=1):
            line["conference_rk"] = rank

    wildcard = [
        line
        for line in ordered
        if line["conference_rk"] is not None
        and line["conference_rk"] > CONFERENCE_PLAYOFF_SPOTS
    ]
    for rank, line in enumerate(wildcard, start=1):
        line["wildcard_rk"] = rank

    return lines


def build_team_season(
    team_id: Any,
    season_id: int,
    season_type: str,
    team_weeks: list[Mapping[str, Any]],
    matchups: list[Mapping[str, Any]],
    conf_by_team: Mapping[str, Any],
    players_used: int,
    rater: Optional[Rater] = None,
) -> dict:
    """
    Build one team's season line for a season type (before ranking).

    Args:
        team_id: Team
        season_id: Season
        season_type: "RS", "PO" or "LT"
        team_weeks: The team's TeamWeek rows in weeks of this season type
        matchups: Matchups of this season type in week order
        conf_by_team: Conference id keyed by str(team_id)
        players_used: Distinct players the team started
        rater: Optional performance rater

    Returns:
        Row dict for TeamSeasonStatLine without ranks
    """
    line: dict[str, Any] = {
        "team_id": team_id,
        "season_id": season_id,
        "season_type": season_type,
        "days": len(team_weeks),
        "players_used": players_used,
    }
    for field in SUMMED_FIELDS:
        line[field] = sum_nullable(row.get(field) for row in team_weeks)
    apply_goalie_ratios(line)

    line.update(team_record(team_id, matchups, conf_by_team))
    line["rating"] = rate_record(
        line,
        rater,
        team_id=team_id,
        season_id=season_id,
        season_type=season_type,
    )
    return line
