"""
Roster Entry Transformer

Turns raw roster rows from the roster source into PlayerDay entries:
resolves league player ids, normalizes stat values, flags new adds and,
after lineup optimization, missed starts and bench starts.
"""

from datetime import date
from typing import Any, Iterable, Mapping, Optional

from core.logging import get_logger
from pipelines.transformers.categories import BENCH_SLOT
from pipelines.transformers.stat_values import (
    apply_goalie_ratios,
    is_one,
    parse_stat,
)
from services.collaborators import LineupOptimizer


log = get_logger("roster")

# Raw roster column -> stat line field
RAW_FIELD_MAP: dict[str, str] = {
    "GP": "gp",
    "MG": "mg",
    "IR": "ir",
    "IRplus": "ir_plus",
    "GS": "gs",
    "G": "g",
    "A": "a",
    "P": "p",
    "PM": "pm",
    "PIM": "pim",
    "PPP": "ppp",
    "SOG": "sog",
    "HIT": "hit",
    "BLK": "blk",
    "W": "w",
    "GA": "ga",
    "GAA": "gaa",
    "SV": "sv",
    "SA": "sa",
    "SVP": "svp",
    "SO": "so",
    "TOI": "toi",
}

# Columns a late correction may change. Lineup columns (GP, GS, MG, IR,
# IRplus) and the rest stay as the original scrape and optimizer set them.
CORRECTION_COLUMNS: tuple[str, ...] = (
    "G", "A", "P", "PPP", "SOG", "HIT", "BLK",
    "W", "GA", "GAA", "SV", "SA", "SVP", "TOI",
)


def normalize_nhl_pos(value: Any) -> str:
    """Join list-valued positions ("C", "LW") into "C,LW"."""
    if not value:
        return ""
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value if v)
    return str(value)


def resolve_pos_group(nhl_pos: Any) -> str:
    """
    Position group from NHL positions: goalies first, then defense.

    Examples:
        >>> resolve_pos_group("C,LW")
        'F'
        >>> resolve_pos_group(["D"])
        'D'
        >>> resolve_pos_group("G")
        'G'
    """
    normalized = normalize_nhl_pos(nhl_pos).upper()
    if "G" in normalized:
        return "G"
    if "D" in normalized:
        return "D"
    return "F"


def normalize_raw_stats(raw: Mapping[str, Any]) -> dict[str, Optional[float]]:
    """Map raw category columns to stat fields; blanks become None."""
    stats: dict[str, Optional[float]] = {}
    for raw_name, field in RAW_FIELD_MAP.items():
        if raw_name in raw:
            stats[field] = parse_stat(raw[raw_name])
        elif field in raw:
            stats[field] = parse_stat(raw[field])
        else:
            stats[field] = None
    if stats["gaa"] is None and stats["svp"] is None:
        apply_goalie_ratios(stats)
    return stats


def player_team_key(player_id: Any, team_id: Any) -> tuple[str, str]:
    return (str(player_id), str(team_id))


def build_roster_entries(
    raw_rows: Iterable[Mapping[str, Any]],
    team_id: int,
    season_id: int,
    week_id: Optional[int],
    target_date: date,
    players_by_yahoo_id: Mapping[str, Any],
    previous_day_keys: set[tuple[str, str]],
    existing_ids: Mapping[tuple[str, str], int],
) -> list[dict]:
    """
    Build PlayerDay entries for one team's roster on one date.

    Rows with a blank player name or an unknown provider id are skipped.
    A player with no row for this team on the previous day is flagged as
    an add. Existing row ids for (player, team, date) are carried over.
    """
    entries = []
    for raw in raw_rows:
        if not raw or not str(raw.get("playerName", "")).strip():
            continue

        yahoo_id = str(raw.get("yahooId", "")).strip()
        player = players_by_yahoo_id.get(yahoo_id)
        if player is None:
            log.warning(
                "roster_player_unknown",
                team_id=team_id,
                yahoo_id=yahoo_id,
                player_name=raw.get("playerName"),
                date=target_date.isoformat(),
            )
            continue

        key = player_team_key(player.id, team_id)
        nhl_pos = normalize_nhl_pos(raw.get("nhlPos") or getattr(player, "nhl_pos", ""))

        entry = {
            "id": existing_ids.get(key),
            "player_id": player.id,
            "team_id": team_id,
            "season_id": season_id,
            "week_id": week_id,
            "date": target_date,
            "player_name": str(raw.get("playerName", "")).strip() or player.name,
            "yahoo_id": yahoo_id,
            "nhl_pos": nhl_pos,
            "nhl_team": normalize_nhl_pos(raw.get("nhlTeam")),
            "pos_group": resolve_pos_group(nhl_pos),
            "best_pos": "",
            "full_pos": "",
            **normalize_raw_stats(raw),
            "add": None if key in previous_day_keys else 1,
            "ms": None,
            "bs": None,
            "rating": None,
        }
        entries.append(entry)
    return entries


def apply_lineup_flags(entries: list[dict]) -> list[dict]:
    """
    Set bench-start and missed-start flags from the optimized lineup.

    bs: started (gs=1) but the optimal lineup benches the player.
    ms: played (gp=1) without starting while the full optimal lineup would
        have used the player.
    """
    for entry in entries:
        started = is_one(entry.get("gs"))
        played = is_one(entry.get("gp"))
        entry["bs"] = 1 if started and entry.get("best_pos") == BENCH_SLOT else None
        entry["ms"] = (
            1
            if played and not started and entry.get("full_pos") not in ("", None, BENCH_SLOT)
            else None
        )
    return entries


def optimize_lineup(
    entries: list[dict],
    optimizer: LineupOptimizer,
    team_id: int,
    target_date: date,
) -> list[dict]:
    """
    Run the lineup optimizer and derive lineup flags.

    If the optimizer raises, the scraped slot/start values are kept and
    missed/bench start flags stay blank for the day.
    """
    if not entries:
        return entries
    try:
        optimized = optimizer.optimize(entries)
    except Exception as e:
        log.warning(
            "lineup_optimizer_failed",
            team_id=team_id,
            date=target_date.isoformat(),
            error=str(e),
            error_type=type(e).__name__,
        )
        for entry in entries:
            entry["ms"] = None
            entry["bs"] = None
        return entries

    for entry in optimized:
        entry["gs"] = parse_stat(entry.get("gs"))
        entry["best_pos"] = entry.get("best_pos") or ""
        entry["full_pos"] = entry.get("full_pos") or ""
    return apply_lineup_flags(optimized)


def merge_correction(existing: Mapping[str, Any], raw: Mapping[str, Any]) -> dict:
    """
    Overlay re-scraped category values on an existing player-day row.

    Only CORRECTION_COLUMNS the source actually sent are overwritten.
    Starts, games played, lineup slots, roster flags and identity stay as
    stored, so missed and bench starts remain consistent with the lineup
    the optimizer chose.
    """
    merged = dict(existing)
    for raw_name in CORRECTION_COLUMNS:
        if raw_name in raw:
            merged[RAW_FIELD_MAP[raw_name]] = parse_stat(raw[raw_name])
    if "GAA" not in raw and "SVP" not in raw:
        apply_goalie_ratios(merged)
    merged["rating"] = None
    return merged
