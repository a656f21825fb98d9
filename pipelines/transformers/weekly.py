"""
Weekly Roll-up

Merges day-level stat lines into player-week and team-week lines, and
player weeks into season split (per team) and total lines.

Player weeks count categories only on days the player was started, and
only the categories of the player's position group. Team weeks sum the
already-gated team days, so a blank team day stays blank in the week
unless some other day has a value.
"""

from collections import defaultdict
from typing import Any, Iterable, Mapping, Optional

from pipelines.transformers.categories import (
    COUNTER_FIELDS,
    GOALIE_FIELDS,
    GOALIE_POS_GROUP,
    ROSTER_MOVE_FIELDS,
    SKATER_FIELDS,
    SUMMED_FIELDS,
    is_stat_enabled,
)
from pipelines.transformers.rating import rate_record
from pipelines.transformers.stat_values import apply_goalie_ratios, is_one, sum_nullable
from services.collaborators import Rater


def _ordered_union(values: Iterable[Any]) -> str:
    """Join comma-separated values keeping first-seen order."""
    seen: list[str] = []
    for value in values:
        for part in str(value or "").split(","):
            part = part.strip()
            if part and part not in seen:
                seen.append(part)
    return ",".join(seen)


def _sort_by_date(rows: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    return sorted(rows, key=lambda row: str(row.get("date") or ""))


def build_player_week(
    day_rows: list[Mapping[str, Any]],
    week: Any,
    rater: Optional[Rater] = None,
) -> dict:
    """
    Roll one player's day rows on one team into a player-week line.

    Args:
        day_rows: PlayerDay rows for a single (player, team, week)
        week: The Week the rows belong to
        rater: Optional performance rater

    Returns:
        Row dict ready for upsert into PlayerWeekStatLine
    """
    rows = _sort_by_date(day_rows)
    latest = rows[-1]
    pos_group = latest.get("pos_group") or ""
    goalie = pos_group == GOALIE_POS_GROUP
    starts = [row for row in rows if is_one(row.get("gs"))]

    record: dict[str, Any] = {
        "player_id": latest.get("player_id"),
        "team_id": latest.get("team_id"),
        "season_id": week.season_id,
        "week_id": week.id,
        "season_type": week.week_type,
        "player_name": latest.get("player_name") or "",
        "yahoo_id": latest.get("yahoo_id"),
        "nhl_pos": _ordered_union(row.get("nhl_pos") for row in rows),
        "nhl_team": _ordered_union(row.get("nhl_team") for row in rows),
        "pos_group": pos_group,
        "days": len(rows),
    }

    for field in COUNTER_FIELDS + ROSTER_MOVE_FIELDS:
        record[field] = sum_nullable(row.get(field) for row in rows)

    own_fields = GOALIE_FIELDS if goalie else SKATER_FIELDS
    other_fields = SKATER_FIELDS if goalie else GOALIE_FIELDS
    for field in own_fields:
        if is_stat_enabled(field, week.season_id):
            record[field] = sum_nullable(row.get(field) for row in starts)
        else:
            record[field] = None
    for field in other_fields:
        record[field] = None

    apply_goalie_ratios(record)
    record["rating"] = rate_record(
        record,
        rater,
        player_id=record["player_id"],
        team_id=record["team_id"],
        week_id=week.id,
    )
    return record


def build_player_weeks(
    day_rows: Iterable[Mapping[str, Any]],
    week: Any,
    rater: Optional[Rater] = None,
) -> list[dict]:
    """Group a week's PlayerDay rows by (player, team) and roll each group up."""
    groups: dict[tuple[Any, Any], list[Mapping[str, Any]]] = defaultdict(list)
    for row in day_rows:
        groups[(row.get("player_id"), row.get("team_id"))].append(row)
    return [build_player_week(rows, week, rater) for rows in groups.values()]


def build_team_week(
    day_rows: list[Mapping[str, Any]],
    week: Any,
    rater: Optional[Rater] = None,
) -> dict:
    """
    Roll one team's day rows into a team-week line.

    Args:
        day_rows: TeamDay rows for a single (team, week)
        week: The Week the rows belong to
        rater: Optional performance rater

    Returns:
        Row dict ready for upsert into TeamWeekStatLine
    """
    record: dict[str, Any] = {
        "team_id": day_rows[0].get("team_id"),
        "season_id": week.season_id,
        "week_id": week.id,
        "days": len(day_rows),
    }
    for field in SUMMED_FIELDS:
        record[field] = sum_nullable(row.get(field) for row in day_rows)

    apply_goalie_ratios(record)
    record["rating"] = rate_record(
        record,
        rater,
        team_id=record["team_id"],
        week_id=week.id,
    )
    return record


def build_team_weeks(
    day_rows: Iterable[Mapping[str, Any]],
    week: Any,
    rater: Optional[Rater] = None,
) -> list[dict]:
    """Group a week's TeamDay rows by team and roll each group up."""
    groups: dict[Any, list[Mapping[str, Any]]] = defaultdict(list)
    for row in day_rows:
        groups[row.get("team_id")].append(row)
    return [build_team_week(rows, week, rater) for rows in groups.values()]


def _roll_up_player_weeks(week_rows: list[Mapping[str, Any]]) -> dict[str, Any]:
    """Shared body of split and total lines; week rows are already gated."""
    rows = sorted(week_rows, key=lambda row: row.get("week_id") or 0)
    latest = rows[-1]
    record: dict[str, Any] = {
        "player_id": latest.get("player_id"),
        "season_id": latest.get("season_id"),
        "season_type": latest.get("season_type"),
        "player_name": latest.get("player_name") or "",
        "nhl_pos": _ordered_union(row.get("nhl_pos") for row in rows),
        "nhl_team": _ordered_union(row.get("nhl_team") for row in rows),
        "pos_group": latest.get("pos_group") or "",
        "days": sum(int(row.get("days") or 0) for row in rows),
    }
    for field in SUMMED_FIELDS:
        record[field] = sum_nullable(row.get(field) for row in rows)
    apply_goalie_ratios(record)
    return record


def build_player_seasons(
    week_rows: Iterable[Mapping[str, Any]],
    rater: Optional[Rater] = None,
) -> tuple[list[dict], list[dict]]:
    """
    Roll a season's player-week lines into split and total lines.

    Splits are per (player, team, season type); totals are per
    (player, season type) across teams.

    Returns:
        (split rows for PlayerSplitStatLine, total rows for PlayerTotalStatLine)
    """
    splits: dict[tuple[Any, Any, Any], list[Mapping[str, Any]]] = defaultdict(list)
    totals: dict[tuple[Any, Any], list[Mapping[str, Any]]] = defaultdict(list)
    for row in week_rows:
        player_id, season_type = row.get("player_id"), row.get("season_type")
        splits[(player_id, row.get("team_id"), season_type)].append(row)
        totals[(player_id, season_type)].append(row)

    split_rows = []
    for (_, team_id, _), rows in splits.items():
        record = _roll_up_player_weeks(rows)
        record["team_id"] = team_id
        record["rating"] = rate_record(
            record, rater, player_id=record["player_id"], team_id=team_id
        )
        split_rows.append(record)

    total_rows = []
    for rows in totals.values():
        record = _roll_up_player_weeks(rows)
        ordered = sorted(rows, key=lambda row: row.get("week_id") or 0)
        record["team_ids"] = _ordered_union(row.get("team_id") for row in ordered)
        record["rating"] = rate_record(record, rater, player_id=record["player_id"])
        total_rows.append(record)

    return split_rows, total_rows
