"""Tests for team-season standings."""

import pytest

from pipelines.transformers.standings import (
    assign_ranks,
    build_team_season,
    compute_streak,
    matchup_result,
    standings_points,
    team_record,
)

CONFERENCES = {"1": 1, "2": 1, "3": 2, "4": 2}


def _matchup(home, away, home_score, away_score, home_win, away_win):
    return {
        "home_team_id": home,
        "away_team_id": away,
        "home_score": home_score,
        "away_score": away_score,
        "home_win": home_win,
        "away_win": away_win,
    }


class TestMatchupResult:
    """A matchup from one team's side."""

    @pytest.mark.unit
    def test_home_tie_win_is_tie_break(self):
        matchup = _matchup(1, 2, 5, 5, True, False)
        assert matchup_result(1, matchup) == ("W", True)
        assert matchup_result(2, matchup) == ("L", True)

    @pytest.mark.unit
    def test_outright_results(self):
        matchup = _matchup(1, 2, 4, 6, False, True)
        assert matchup_result(1, matchup) == ("L", False)
        assert matchup_result(2, matchup) == ("W", False)

    @pytest.mark.unit
    def test_undecided_matchup(self):
        assert matchup_result(1, _matchup(1, 2, 3, 2, None, None)) == (None, False)


class TestRecord:
    """Wins, losses, conference split and streak."""

    @pytest.mark.unit
    def test_streak(self):
        assert compute_streak(["W", "W", "L", "W", "W", "W"]) == "3W"
        assert compute_streak(["L"]) == "1L"
        assert compute_streak([]) == ""

    @pytest.mark.unit
    def test_team_record_counts(self):
        matchups = [
            _matchup(1, 2, 6, 4, True, False),   # conference win
            _matchup(3, 1, 5, 5, True, False),   # non-conference tie-break loss
            _matchup(1, 4, 5, 5, True, False),   # non-conference tie-break win
            _matchup(2, 1, 7, 3, False, True),   # conference away win
            _matchup(2, 3, 7, 3, True, False),   # not involving team 1
        ]
        record = team_record(1, matchups, CONFERENCES)
        assert record["team_w"] == 3
        assert record["team_l"] == 1
        assert record["team_hw"] == 1
        assert record["team_hl"] == 1
        assert record["team_ccw"] == 2
        assert record["team_ccl"] == 0
        assert record["team_cchw"] == 0
        assert record["team_cchl"] == 0
        assert record["streak"] == "2W"

    @pytest.mark.unit
    def test_points(self):
        assert standings_points({"team_w": 5, "team_hw": 1, "team_hl": 2}) == 3 * 4 + 2 + 2


class TestRanks:
    """Overall, conference and wildcard ranks."""

    @pytest.mark.unit
    def test_rank_order_points_then_wins_then_team_id(self):
        lines = [
            {"team_id": 1, "team_w": 3, "team_hw": 0, "team_hl": 0},  # 9 pts
            {"team_id": 2, "team_w": 3, "team_hw": 0, "team_hl": 0},  # 9 pts
            {"team_id": 3, "team_w": 4, "team_hw": 2, "team_hl": 0},  # 10 pts
            {"team_id": 4, "team_w": 2, "team_hw": 0, "team_hl": 3},  # 9 pts, fewer wins
        ]
        ranked = {line["team_id"]: line for line in assign_ranks(lines, CONFERENCES)}
        assert [ranked[t]["overall_rk"] for t in (3, 1, 2, 4)] == [1, 2, 3, 4]
        assert ranked[1]["conference_rk"] == 1
        assert ranked[2]["conference_rk"] == 2
        assert ranked[3]["conference_rk"] == 1
        assert ranked[4]["conference_rk"] == 2
        assert all(line["wildcard_rk"] is None for line in ranked.values())

    @pytest.mark.unit
    def test_wildcard_for_teams_outside_conference_top_three(self):
        conferences = {str(t): 1 if t <= 5 else 2 for t in range(1, 11)}
        lines = [
            {"team_id": t, "team_w": 10 - t, "team_hw": 0, "team_hl": 0} for t in range(1, 11)
        ]
        ranked = {line["team_id"]: line for line in assign_ranks(lines, conferences)}
        # Conference 1: teams 1-5, conference 2: teams 6-10
        assert ranked[4]["conference_rk"] == 4
        assert ranked[4]["wildcard_rk"] == 1
        assert ranked[5]["wildcard_rk"] == 2
        assert ranked[9]["wildcard_rk"] == 3
        assert ranked[10]["wildcard_rk"] == 4
        assert ranked[3]["wildcard_rk"] is None

    @pytest.mark.unit
    def test_teams_without_conference_only_get_overall_rank(self):
        ranked = assign_ranks([{"team_id": 9, "team_w": 1, "team_hw": 0, "team_hl": 0}], {})
        assert ranked[0]["overall_rk"] == 1
        assert ranked[0]["conference_rk"] is None


class TestBuildTeamSeason:
    """Team-season line."""

    @pytest.mark.unit
    def test_sums_weeks_and_attaches_record(self):
        weeks = [
            {"g": 10, "w": 2, "ga": 6, "toi": 180, "sv": 80, "sa": 86, "gp": 40},
            {"g": None, "w": 1, "ga": 3, "toi": 120, "sv": 50, "sa": 53, "gp": 35},
        ]
        matchups = [_matchup(1, 2, 6, 4, True, False)]
        line = build_team_season(1, 7, "RS", weeks, matchups, CONFERENCES, players_used=18)
        assert line["g"] == 10
        assert line["w"] == 3
        assert line["days"] == 2
        assert line["gaa"] == round(9 / 300 * 60, 5)
        assert line["svp"] == round(130 / 139, 6)
        assert line["team_w"] == 1
        assert line["streak"] == "1W"
        assert line["players_used"] == 18
        assert line["rating"] is None
