"""
Rating Adapter

Boundary around the external performance rating function. The rater is
opaque; this module only calls it and normalizes its answer. A failing or
missing rater yields a blank rating and never aborts a batch.
"""

from typing import Any, Mapping, Optional

from core.logging import get_logger
from pipelines.transformers.stat_values import StatValue, parse_stat
from services.collaborators import Rater


log = get_logger("rating")


def _extract_score(result: Any) -> StatValue:
    if result is None:
        return None
    if isinstance(result, Mapping):
        return parse_stat(result.get("score"))
    return parse_stat(getattr(result, "score", None))


def rate_record(
    record: Mapping[str, Any],
    rater: Optional[Rater],
    **context: Any,
) -> StatValue:
    """
    Rate one stat line.

    Args:
        record: Player or team stat line
        rater: Injected rater, or None when rating is not configured
        **context: Identifying fields for the failure log (player_id, date, ...)

    Returns:
        The score, or None when unavailable
    """
    if rater is None:
        return None

    try:
        result = rater.rate(dict(record))
    except Exception as e:
        log.warning(
            "rating_failed",
            error=str(e),
            error_type=type(e).__name__,
            **context,
        )
        return None

    score = _extract_score(result)
    if score is None:
        log.debug("rating_unavailable", **context)
    return score


def ensure_ratings(records: list[dict], rater: Optional[Rater]) -> None:
    """Fill in rating for records that do not carry one yet."""
    for record in records:
        if record.get("rating") is not None:
            continue
        record["rating"] = rate_record(
            record,
            rater,
            player_id=record.get("player_id"),
            team_id=record.get("team_id"),
            date=str(record.get("date", "")),
        )
