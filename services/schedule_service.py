from datetime import datetime, date, timedelta
from typing import Optional

import pytz

from core.settings import settings


# Idle windows (league time) in which scheduled scrapes are skipped.
# Each entry is ((start_hour, start_minute), (end_hour, end_minute)), inclusive.
IDLE_WINDOWS: tuple[tuple[tuple[int, int], tuple[int, int]], ...] = (
    ((2, 0), (3, 59)),
    ((4, 21), (7, 59)),
    ((8, 21), (11, 59)),
)


def league_timezone():
    return settings.league_tz


def league_now(now: Optional[datetime] = None) -> datetime:
    """
    Current time in the league timezone.

    Args:
        now: Reference time. Naive values are taken as UTC.

    Returns:
        Timezone-aware datetime in the league timezone.
    """
    tz = league_timezone()
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    return now.astimezone(tz)


def get_target_date(now: Optional[datetime] = None) -> date:
    """
    Date a scrape run should collect.

    Games finish late in the evening, so until the rollover hour (7am
    league time by default) runs still target the previous day.

    Args:
        now: Reference time. Defaults to the current time.

    Returns:
        Target calendar date.
    """
    local = league_now(now)
    if local.hour < settings.scrape_rollover_hour:
        return (local - timedelta(days=1)).date()
    return local.date()


def should_skip_scrape_window(now: Optional[datetime] = None) -> bool:
    """
    Whether a scheduled scrape falls in a known-idle window.

    Args:
        now: Reference time. Defaults to the current time.

    Returns:
        True if the run should be a no-op.
    """
    local = league_now(now)
    minute_of_day = local.hour * 60 + local.minute
    for (start_h, start_m), (end_h, end_m) in IDLE_WINDOWS:
        if start_h * 60 + start_m <= minute_of_day <= end_h * 60 + end_m:
            return True
    return False


def previous_day(target: date) -> date:
    return target - timedelta(days=1)
