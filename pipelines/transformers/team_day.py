"""
Team-Day Aggregator

Reduces one team's optimized lineup for a date into a single team-day stat
line. Category sums are gated twice: by whether the team actually started a
skater (or goalie) that day, and by the season's stat era. A gated-out
category is blank (None), never 0.
"""

from datetime import date
from typing import Any, Iterable, Mapping, Optional

from core.logging import get_logger
from pipelines.transformers.categories import (
    COUNTER_FIELDS,
    GOALIE_FIELDS,
    GOALIE_POS_GROUP,
    ROSTER_MOVE_FIELDS,
    SKATER_FIELDS,
    is_stat_enabled,
)
from pipelines.transformers.rating import rate_record
from pipelines.transformers.stat_values import (
    gated_sum,
    goals_against_average,
    is_one,
    save_percentage,
    sum_stat,
)
from services.collaborators import Rater


log = get_logger("team_day")


def is_goalie(entry: Mapping[str, Any]) -> bool:
    return entry.get("pos_group") == GOALIE_POS_GROUP


def active_lineup(entries: Iterable[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Entries the lineup actually started (gs=1)."""
    return [entry for entry in entries if is_one(entry.get("gs"))]


def started_flags(active: list[Mapping[str, Any]]) -> tuple[bool, bool]:
    """
    (skater_started, goalie_started) for an active lineup.

    A group counts as started when at least one of its active players
    also played (gp=1).
    """
    skater_started = any(
        is_one(entry.get("gp")) for entry in active if not is_goalie(entry)
    )
    goalie_started = any(
        is_one(entry.get("gp")) for entry in active if is_goalie(entry)
    )
    return skater_started, goalie_started


def aggregate_lineup(entries: list[Mapping[str, Any]], season_id: int) -> dict:
    """
    Sum a lineup into team-day stat fields (no identity, no rating).

    Args:
        entries: All roster entries for the team and date
        season_id: Season, for stat era gating

    Returns:
        Dict of stat fields. Counters are summed over the full roster;
        categories over started players only, or None when gated out.
    """
    active = active_lineup(entries)
    skater_started, goalie_started = started_flags(active)
    skaters = [entry for entry in active if not is_goalie(entry)]
    goalies = [entry for entry in active if is_goalie(entry)]

    stats: dict[str, Optional[float]] = {}
    for field in COUNTER_FIELDS + ROSTER_MOVE_FIELDS:
        stats[field] = sum_stat(entries, field)

    for field in SKATER_FIELDS:
        stats[field] = gated_sum(
            skaters, field, skater_started and is_stat_enabled(field, season_id)
        )
    for field in GOALIE_FIELDS:
        stats[field] = gated_sum(
            goalies, field, goalie_started and is_stat_enabled(field, season_id)
        )

    if goalie_started:
        stats["gaa"] = goals_against_average(stats["ga"], stats["toi"])
        stats["svp"] = save_percentage(stats["sv"], stats["sa"])
    else:
        stats["gaa"] = None
        stats["svp"] = None

    return stats


def build_team_day(
    lineup: list[Mapping[str, Any]],
    team_id: int,
    season_id: int,
    week_id: Optional[int],
    target_date: date,
    rater: Optional[Rater] = None,
) -> dict:
    """
    Build the team-day stat line for one team and date.

    An empty lineup still yields a record: every category blank, every
    counter 0.

    Args:
        lineup: The team's roster entries for the date, after optimization
        team_id: Fantasy team
        season_id: Season the date belongs to
        week_id: Week the date belongs to
        target_date: Calendar date
        rater: Optional performance rater for the team-day rating

    Returns:
        Row dict ready for upsert into TeamDayStatLine
    """
    record = {
        "team_id": team_id,
        "season_id": season_id,
        "week_id": week_id,
        "date": target_date,
        **aggregate_lineup(list(lineup), season_id),
    }
    record["rating"] = rate_record(
        record,
        rater,
        team_id=team_id,
        date=target_date.isoformat(),
    )

    log.debug(
        "team_day_built",
        team_id=team_id,
        date=target_date.isoformat(),
        players=len(lineup),
        skater_started=record["g"] is not None,
        goalie_started=record["w"] is not None,
    )
    return record
