"""Pytest configuration and fixtures for pipeline tests."""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

import pytest
from peewee import SqliteDatabase

from db.base import close_db, init_db
from db.models import Matchup, Player, Season, Team, Week
from services.collaborators import reset_breakers


# -----------------------------------------------------------------------------
# Stub collaborators
# -----------------------------------------------------------------------------


class StubRosterSource:
    """Serves canned roster rows keyed by (team_id, date)."""

    def __init__(self, rosters: Optional[Dict] = None, failing_team_ids=()):
        self.rosters = rosters or {}
        self.failing_team_ids = set(failing_team_ids)
        self.calls: List[tuple] = []

    def fetch_roster(self, team, target_date, season_id):
        self.calls.append((team.id, target_date, season_id))
        if team.id in self.failing_team_ids:
            raise RuntimeError(f"roster page for team {team.id} unavailable")
        return [dict(row) for row in self.rosters.get((team.id, target_date), [])]


class StubLineupOptimizer:
    """
    Deterministic optimizer: players who played get their position slot in
    the full lineup; the best lineup is the full lineup restricted to
    started players. Everyone else is benched.
    """

    def optimize(self, entries):
        for entry in entries:
            played = entry.get("gp") == 1
            started = entry.get("gs") == 1
            slot = entry["pos_group"] if played else "BN"
            entry["full_pos"] = slot
            entry["best_pos"] = slot if started else "BN"
        return entries


class FailingLineupOptimizer:
    def optimize(self, entries):
        raise RuntimeError("optimizer crashed")


class StubRater:
    """Scores a record as goals + assists + wins."""

    def rate(self, record):
        total = sum(float(record.get(field) or 0) for field in ("g", "a", "w"))
        return {"score": total}


class FailingRater:
    def rate(self, record):
        raise ValueError("rating model unavailable")


# -----------------------------------------------------------------------------
# Row builders
# -----------------------------------------------------------------------------


def raw_skater(yahoo_id: str, name: str, pos: str = "C", gp=1, gs=1, **stats) -> dict:
    """Raw roster row as the roster source returns it."""
    row = {
        "yahooId": yahoo_id,
        "playerName": name,
        "nhlPos": pos,
        "nhlTeam": "TOR",
        "GP": gp,
        "GS": gs,
        "MG": 0,
        "IR": 0,
        "IRplus": 0,
    }
    row.update(stats)
    return row


def raw_goalie(yahoo_id: str, name: str, gp=1, gs=1, **stats) -> dict:
    return raw_skater(yahoo_id, name, pos="G", gp=gp, gs=gs, **stats)


def entry(pos_group: str = "F", gp=1, gs=1, **stats) -> dict:
    """Roster entry in stat-line field names, as after optimization."""
    row = {"pos_group": pos_group, "gp": gp, "gs": gs, "best_pos": "", "full_pos": ""}
    row.update(stats)
    return row


# -----------------------------------------------------------------------------
# Database fixtures
# -----------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def closed_breakers():
    """Start every test with a closed roster source breaker."""
    reset_breakers()
    yield
    reset_breakers()


@pytest.fixture
def database():
    """Fresh in-memory SQLite database bound to the model proxy."""
    database = init_db(SqliteDatabase(":memory:"))
    yield database
    close_db()


SEASON_ID = 7
WEEK_ID = 701
SCRAPE_DATE = date(2025, 1, 8)


@pytest.fixture
def league(database):
    """
    Season 7 with one complete regular-season week, four teams in two
    conferences, and a small player pool.
    """
    Season.create(id=SEASON_ID, name="2024-25", start_date=date(2024, 10, 1), end_date=date(2025, 4, 30))
    Week.create(
        id=WEEK_ID,
        season_id=SEASON_ID,
        week_num=14,
        week_type="RS",
        start_date=date(2025, 1, 6),
        end_date=date(2025, 1, 12),
    )
    for team_id, name, conf in ((1, "Aces", 1), (2, "Bruins", 1), (3, "Comets", 2), (4, "Dukes", 2)):
        Team.create(id=team_id, season_id=SEASON_ID, name=name, yahoo_id=str(team_id), conf_id=conf)

    players = [
        (101, "y101", "Skater One", "C"),
        (102, "y102", "Skater Two", "LW,RW"),
        (103, "y103", "Defender Three", "D"),
        (104, "y104", "Goalie Four", "G"),
        (201, "y201", "Skater Five", "C"),
        (204, "y204", "Goalie Six", "G"),
    ]
    for player_id, yahoo_id, name, pos in players:
        Player.create(id=player_id, yahoo_id=yahoo_id, name=name, nhl_pos=pos)

    Matchup.create(season_id=SEASON_ID, week_id=WEEK_ID, home_team_id=1, away_team_id=2)
    Matchup.create(season_id=SEASON_ID, week_id=WEEK_ID, home_team_id=3, away_team_id=4)

    return {"season_id": SEASON_ID, "week_id": WEEK_ID, "date": SCRAPE_DATE}


@pytest.fixture
def team_one_roster() -> List[dict]:
    return [
        raw_skater("y101", "Skater One", G=2, A=1, P=3, PM=1, PIM=2, PPP=1, SOG=5, HIT=2, BLK=1),
        raw_skater("y102", "Skater Two", pos="LW,RW", G=0, A=2, P=2, PM=-1, PIM=0, PPP=0, SOG=3, HIT=1, BLK=0),
        raw_skater("y103", "Defender Three", pos="D", gp=1, gs=0, G=1, A=0, P=1, SOG=2, HIT=4, BLK=3),
        raw_goalie("y104", "Goalie Four", W=1, GA=2, SV=28, SA=30, SO=0, TOI=60),
    ]


@pytest.fixture
def team_two_roster() -> List[dict]:
    return [
        raw_skater("y201", "Skater Five", G=1, A=1, P=2, SOG=4, HIT=0, BLK=2),
        raw_goalie("y204", "Goalie Six", gp=0, gs=1),
    ]
