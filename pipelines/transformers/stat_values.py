"""
Stat Value Helpers

Stat values are Optional[float]: None is "blank" (did not play / not
applicable) and must stay distinguishable from a recorded 0. Arithmetic
treats blank as 0; sums of nothing but blanks stay blank.
"""

import math
from typing import Any, Iterable, Mapping, Optional

StatValue = Optional[float]

GAA_DECIMALS = 5
SVP_DECIMALS = 6

_BLANK_STRINGS = {"", "-", "--", "n/a", "null", "none"}


def parse_stat(value: Any) -> StatValue:
    """
    Parse a raw stat value into a float, or None for blank.

    Examples:
        >>> parse_stat("3")
        3.0
        >>> parse_stat("")
        >>> parse_stat("-")
        >>> parse_stat(0)
        0.0
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if text.lower() in _BLANK_STRINGS:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def as_number(value: Any) -> float:
    """Numeric view of a stat value; blank and junk count as 0."""
    parsed = parse_stat(value)
    return 0.0 if parsed is None else parsed


def is_one(value: Any) -> bool:
    """True for flag columns set to 1 ("1", 1, 1.0)."""
    return parse_stat(value) == 1


def sum_stat(records: Iterable[Mapping[str, Any]], field: str) -> float:
    """Sum a field across records, blanks counted as 0."""
    return sum(as_number(record.get(field)) for record in records)


def sum_nullable(values: Iterable[Any]) -> StatValue:
    """Sum values, staying blank only if every value is blank."""
    total: StatValue = None
    for value in values:
        parsed = parse_stat(value)
        if parsed is None:
            continue
        total = parsed if total is None else total + parsed
    return total


def gated_sum(records: Iterable[Mapping[str, Any]], field: str, enabled: bool) -> StatValue:
    """Sum a field when enabled, otherwise blank."""
    if not enabled:
        return None
    return sum_stat(records, field)


def goals_against_average(ga: Any, toi: Any) -> StatValue:
    """GAA = goals against per 60 minutes of ice time, 5 decimals."""
    goals_against = parse_stat(ga)
    minutes = parse_stat(toi)
    if goals_against is None or minutes is None or minutes <= 0:
        return None
    return round(goals_against / minutes * 60, GAA_DECIMALS)


def save_percentage(sv: Any, sa: Any) -> StatValue:
    """SVP = saves / shots against, 6 decimals."""
    saves = parse_stat(sv)
    shots_against = parse_stat(sa)
    if saves is None or shots_against is None or shots_against <= 0:
        return None
    return round(saves / shots_against, SVP_DECIMALS)


def apply_goalie_ratios(record: dict) -> dict:
    """Recompute gaa/svp on a record from its summed components."""
    record["gaa"] = goals_against_average(record.get("ga"), record.get("toi"))
    record["svp"] = save_percentage(record.get("sv"), record.get("sa"))
    return record
