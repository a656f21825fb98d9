"""Tests for the matchup resolver."""

from datetime import date
from types import SimpleNamespace

import pytest

from core.exceptions import PartialDataWarning
from pipelines.transformers.matchups import (
    category_winner,
    goalie_starts,
    resolve_matchup,
    score_matchup,
)
from pipelines.transformers.categories import CategoryRule


def _team_week(**stats):
    base = {
        "g": 10, "a": 15, "p": 25, "ppp": 4, "sog": 90, "hit": 30, "blk": 20,
        "w": 2, "gaa": 2.5, "svp": 0.91, "so": 0,
    }
    base.update(stats)
    return base


def _resolve(home, away, home_gs=3, away_gs=3, minimum=2, complete=True, season_id=7, **kwargs):
    return resolve_matchup(
        home_stats=home,
        away_stats=away,
        season_id=season_id,
        home_goalie_starts=home_gs,
        away_goalie_starts=away_gs,
        week_complete=complete,
        goalie_start_minimum=minimum,
        **kwargs,
    )


class TestCategoryWinner:
    """Single category decisions."""

    @pytest.mark.unit
    def test_higher_is_better(self):
        rule = CategoryRule("g")
        assert category_winner(rule, {"g": 5}, {"g": 3}, True, True) == "home"
        assert category_winner(rule, {"g": 1}, {"g": 3}, True, True) == "away"

    @pytest.mark.unit
    def test_lower_is_better(self):
        rule = CategoryRule("gaa", higher_better=False, goalie_only=True)
        assert category_winner(rule, {"gaa": 2.1}, {"gaa": 3.4}, True, True) == "home"

    @pytest.mark.unit
    def test_exact_tie_awards_nothing(self):
        assert category_winner(CategoryRule("hit"), {"hit": 7}, {"hit": 7}, True, True) is None

    @pytest.mark.unit
    def test_blank_compares_as_zero(self):
        rule = CategoryRule("blk")
        assert category_winner(rule, {"blk": None}, {"blk": 1}, True, True) == "away"
        assert category_winner(rule, {"blk": None}, {"blk": 0}, True, True) is None

    @pytest.mark.unit
    def test_goalie_category_skipped_when_neither_eligible(self):
        rule = CategoryRule("w", goalie_only=True)
        assert category_winner(rule, {"w": 3}, {"w": 0}, False, False) is None


class TestGoalieEligibility:
    """Goalie-start minimum."""

    @pytest.mark.unit
    def test_goalie_starts_sums_goalie_rows_of_the_team(self):
        rows = [
            {"team_id": 1, "pos_group": "G", "gs": 2},
            {"team_id": 1, "pos_group": "G", "gs": 1},
            {"team_id": 1, "pos_group": "F", "gs": 7},
            {"team_id": 2, "pos_group": "G", "gs": 4},
            {"team_id": 1, "pos_group": "G", "gs": None},
        ]
        assert goalie_starts(rows, 1) == 3
        assert goalie_starts(rows, "2") == 4

    @pytest.mark.unit
    def test_only_eligible_side_wins_every_goalie_category(self):
        # Away has far better goalie numbers but only one start
        home = _team_week(w=0, gaa=5.0, svp=0.850)
        away = _team_week(w=1, gaa=0.5, svp=0.990)
        outcome = _resolve(home, away, home_gs=3, away_gs=1, minimum=3)
        for field in ("w", "gaa", "svp"):
            assert outcome.category_winners[field] == "home"

    @pytest.mark.unit
    def test_end_to_end_below_threshold_loses_goalie_categories(self):
        home = _team_week(w=3, svp=0.950)
        away = _team_week(w=1, svp=0.880)
        outcome = _resolve(home, away, home_gs=1, away_gs=4, minimum=3)
        assert outcome.category_winners["w"] == "away"
        assert outcome.category_winners["svp"] == "away"

    @pytest.mark.unit
    def test_both_ineligible_skips_goalie_categories(self):
        outcome = _resolve(_team_week(w=4), _team_week(w=0), home_gs=1, away_gs=0, minimum=2)
        for field in ("w", "gaa", "svp"):
            assert outcome.category_winners[field] is None


class TestScoring:
    """Scores and win flags."""

    @pytest.mark.unit
    def test_scores_count_category_wins(self):
        home = _team_week(g=12, a=10, hit=30)
        away = _team_week(g=8, a=20, hit=30)
        outcome = _resolve(home, away)
        assert outcome.category_winners["g"] == "home"
        assert outcome.category_winners["a"] == "away"
        assert outcome.category_winners["hit"] is None
        assert outcome.home_score == 1
        assert outcome.away_score == 1

    @pytest.mark.unit
    def test_era_categories_not_scored_in_season_seven(self):
        outcome = _resolve(_team_week(pm=10, so=2), _team_week(pm=-3, so=0))
        assert "pm" not in outcome.category_winners
        assert "so" not in outcome.category_winners

    @pytest.mark.unit
    def test_era_categories_scored_in_season_four(self):
        outcome = _resolve(_team_week(pm=10, pim=8, so=2), _team_week(pm=-3, pim=2, so=0), season_id=4)
        assert outcome.category_winners["pm"] == "home"
        assert outcome.category_winners["pim"] == "home"
        assert outcome.category_winners["so"] == "home"

    @pytest.mark.unit
    def test_incomplete_week_keeps_win_flags_blank(self):
        outcome = _resolve(_team_week(g=20), _team_week(g=1), complete=False)
        assert outcome.home_score == 1
        assert outcome.home_win is None
        assert outcome.away_win is None

    @pytest.mark.unit
    def test_complete_week_sets_win_flags(self):
        outcome = _resolve(_team_week(g=1), _team_week(g=20), complete=True)
        assert outcome.home_win is False
        assert outcome.away_win is True

    @pytest.mark.unit
    def test_tied_score_is_home_win_by_default(self):
        outcome = _resolve(_team_week(), _team_week(), complete=True)
        assert outcome.home_score == outcome.away_score == 0
        assert outcome.home_win is True
        assert outcome.away_win is False

    @pytest.mark.unit
    def test_tied_score_is_double_loss_without_home_tie_break(self):
        outcome = _resolve(_team_week(), _team_week(), complete=True, home_wins_ties=False)
        assert outcome.home_win is False
        assert outcome.away_win is False

    @pytest.mark.unit
    def test_rescoring_is_idempotent(self):
        home = _team_week(g=12, sog=70, w=3)
        away = _team_week(g=9, sog=95, w=1)
        first = _resolve(home, away)
        second = _resolve(home, away)
        assert first.as_update() == second.as_update()


class TestScoreMatchup:
    """Scoring a stored matchup shell."""

    WEEK = SimpleNamespace(
        id=701,
        season_id=7,
        is_complete_on=lambda today: today >= date(2025, 1, 12),
    )

    @pytest.mark.unit
    def test_missing_team_week_raises_partial_data(self):
        matchup = {"id": 1, "home_team_id": 1, "away_team_id": 2}
        with pytest.raises(PartialDataWarning) as excinfo:
            score_matchup(matchup, self.WEEK, {"1": _team_week()}, [], date(2025, 1, 13), 2)
        assert excinfo.value.context["missing_team_ids"] == ["2"]

    @pytest.mark.unit
    def test_completeness_follows_today(self):
        matchup = {"id": 1, "home_team_id": 1, "away_team_id": 2}
        team_weeks = {"1": _team_week(g=30), "2": _team_week(g=1)}
        during = score_matchup(matchup, self.WEEK, team_weeks, [], date(2025, 1, 11), 2)
        after = score_matchup(matchup, self.WEEK, team_weeks, [], date(2025, 1, 12), 2)
        assert during.home_win is None
        assert after.home_win is True
        assert during.home_score == after.home_score
