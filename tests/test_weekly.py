"""Tests for the weekly roll-up transformers."""

from datetime import date
from types import SimpleNamespace

import pytest

from conftest import StubRater
from pipelines.transformers.categories import GOALIE_FIELDS, SKATER_FIELDS
from pipelines.transformers.weekly import (
    build_player_seasons,
    build_player_weeks,
    build_team_week,
    build_team_weeks,
)

WEEK = SimpleNamespace(id=701, season_id=7, week_type="RS")


def _player_day(day, player_id=101, team_id=1, pos_group="F", **stats):
    row = {
        "player_id": player_id,
        "team_id": team_id,
        "date": date(2025, 1, day),
        "pos_group": pos_group,
        "player_name": "Skater One",
        "nhl_pos": "C",
        "nhl_team": "TOR",
    }
    row.update(stats)
    return row


class TestPlayerWeek:
    """Player-week roll-up."""

    @pytest.mark.unit
    def test_categories_sum_over_starts_counters_over_all_days(self):
        rows = [
            _player_day(6, gp=1, gs=1, g=1, sog=3),
            _player_day(7, gp=1, gs=0, g=2, sog=4),
            _player_day(8, gp=0, gs=0, add=1),
        ]
        (week_line,) = build_player_weeks(rows, WEEK)
        assert week_line["g"] == 1
        assert week_line["sog"] == 3
        assert week_line["gp"] == 2
        assert week_line["gs"] == 1
        assert week_line["add"] == 1
        assert week_line["days"] == 3
        assert week_line["season_type"] == "RS"

    @pytest.mark.unit
    def test_skater_has_blank_goalie_fields(self):
        (week_line,) = build_player_weeks([_player_day(6, gp=1, gs=1, g=1, w=1)], WEEK)
        for field in GOALIE_FIELDS + ("gaa", "svp"):
            assert week_line[field] is None

    @pytest.mark.unit
    def test_goalie_week_ratios(self):
        rows = [
            _player_day(6, player_id=104, pos_group="G", gp=1, gs=1, w=1, ga=2, sv=28, sa=30, toi=60, g=1),
            _player_day(8, player_id=104, pos_group="G", gp=1, gs=1, w=0, ga=4, sv=25, sa=29, toi=59),
        ]
        (week_line,) = build_player_weeks(rows, WEEK)
        assert week_line["w"] == 1
        assert week_line["toi"] == 119
        assert week_line["gaa"] == round(6 / 119 * 60, 5)
        assert week_line["svp"] == round(53 / 59, 6)
        for field in SKATER_FIELDS:
            assert week_line[field] is None

    @pytest.mark.unit
    def test_no_starts_leaves_categories_blank(self):
        (week_line,) = build_player_weeks([_player_day(6, gp=1, gs=0, g=3)], WEEK)
        assert week_line["g"] is None
        assert week_line["gp"] == 1

    @pytest.mark.unit
    def test_era_gated_stats_stay_blank(self):
        (week_line,) = build_player_weeks([_player_day(6, gp=1, gs=1, pm=2)], WEEK)
        assert week_line["pm"] is None

    @pytest.mark.unit
    def test_groups_by_player_and_team_with_position_union(self):
        rows = [
            _player_day(6, gs=1, gp=1, nhl_pos="C"),
            _player_day(7, gs=1, gp=1, nhl_pos="C,LW", nhl_team="MTL"),
            _player_day(8, team_id=2, gs=1, gp=1),
        ]
        lines = {(l["player_id"], l["team_id"]): l for l in build_player_weeks(rows, WEEK)}
        assert set(lines) == {(101, 1), (101, 2)}
        assert lines[(101, 1)]["nhl_pos"] == "C,LW"
        assert lines[(101, 1)]["nhl_team"] == "TOR,MTL"
        assert lines[(101, 1)]["days"] == 2

    @pytest.mark.unit
    def test_rated(self):
        (week_line,) = build_player_weeks([_player_day(6, gp=1, gs=1, g=2, a=1)], WEEK, StubRater())
        assert week_line["rating"] == 3.0


class TestTeamWeek:
    """Team-week roll-up."""

    @pytest.mark.unit
    def test_blank_days_do_not_blank_the_week(self):
        days = [
            {"team_id": 1, "g": None, "w": None, "gp": 0},
            {"team_id": 1, "g": 3, "w": 1, "ga": 2, "sv": 20, "sa": 22, "toi": 60, "gp": 5},
        ]
        line = build_team_week(days, WEEK)
        assert line["g"] == 3
        assert line["w"] == 1
        assert line["gp"] == 5
        assert line["days"] == 2
        assert line["gaa"] == 2.0
        assert line["svp"] == round(20 / 22, 6)

    @pytest.mark.unit
    def test_all_blank_days_stay_blank(self):
        days = [{"team_id": 1, "g": None, "gp": 0}, {"team_id": 1, "g": None, "gp": 0}]
        line = build_team_week(days, WEEK)
        assert line["g"] is None
        assert line["gaa"] is None
        assert line["gp"] == 0

    @pytest.mark.unit
    def test_one_line_per_team(self):
        days = [{"team_id": 1, "g": 1}, {"team_id": 2, "g": 2}, {"team_id": 1, "g": 1}]
        lines = {line["team_id"]: line for line in build_team_weeks(days, WEEK)}
        assert lines[1]["g"] == 2
        assert lines[2]["g"] == 2
        assert lines[1]["week_id"] == 701
        assert lines[1]["season_id"] == 7


def _player_week(week_id, team_id, player_id=101, season_type="RS", **stats):
    row = {
        "player_id": player_id,
        "team_id": team_id,
        "season_id": 7,
        "week_id": week_id,
        "season_type": season_type,
        "player_name": "Skater One",
        "nhl_pos": "C",
        "nhl_team": "TOR",
        "pos_group": "F",
        "days": 7,
    }
    row.update(stats)
    return row


class TestPlayerSeason:
    """Split (per team) and total (across teams) season lines."""

    @pytest.mark.unit
    def test_traded_player_gets_a_split_per_team_and_one_total(self):
        rows = [
            _player_week(701, 1, g=2, a=1, gs=5),
            _player_week(702, 1, g=None, a=None, gs=0, nhl_team="MTL"),
            _player_week(703, 3, g=1, a=3, gs=6, days=4),
        ]
        splits, totals = build_player_seasons(rows, StubRater())

        by_team = {split["team_id"]: split for split in splits}
        assert set(by_team) == {1, 3}
        assert by_team[1]["g"] == 2
        assert by_team[1]["days"] == 14
        assert by_team[1]["nhl_team"] == "TOR,MTL"
        assert by_team[3]["a"] == 3

        (total,) = totals
        assert total["team_ids"] == "1,3"
        assert total["g"] == 3
        assert total["a"] == 4
        assert total["gs"] == 11
        assert total["days"] == 18
        assert total["w"] is None
        assert total["rating"] == 7.0

    @pytest.mark.unit
    def test_season_types_are_kept_apart(self):
        rows = [
            _player_week(701, 1, g=2),
            _player_week(720, 1, season_type="PO", g=1),
        ]
        splits, totals = build_player_seasons(rows)
        assert len(splits) == 2
        assert sorted((t["season_type"], t["g"]) for t in totals) == [("PO", 1), ("RS", 2)]
        assert all(t["rating"] is None for t in totals)

    @pytest.mark.unit
    def test_goalie_ratios_from_season_components(self):
        rows = [
            _player_week(701, 1, pos_group="G", ga=4, toi=120, sv=56, sa=60),
            _player_week(702, 1, pos_group="G", ga=2, toi=60, sv=28, sa=30),
        ]
        (split,), _ = build_player_seasons(rows)
        assert split["gaa"] == pytest.approx(2.0)
        assert split["svp"] == pytest.approx(0.933333)
