"""
Tests for score, combo and lives bookkeeping.
"""

import pytest

from fruit_slash.slash_core.config_loader import load_config
from fruit_slash.slash_core.scoring import ScoreTracker


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def scorer(config):
    return ScoreTracker(config)


class TestComboPoints:
    """Test the capped combo multiplier."""

    @pytest.mark.parametrize("combo,expected", [
        (1, 10),
        (2, 20),
        (5, 50),
        (10, 100),
        (11, 100),
        (25, 100),
    ])
    def test_points_for_combo(self, scorer, combo, expected):
        assert scorer.points_for_combo(combo) == expected

    def test_streak_total(self, scorer):
        """k consecutive fruits should earn 10 * sum(min(i, 10) for i in 1..k)."""
        k = 15
        for i in range(k):
            scorer.apply_fruit_hit(i, "apple")

        expected = 10 * sum(min(i, 10) for i in range(1, k + 1))
        assert scorer.score == expected
        assert scorer.combo == k
        assert scorer.max_combo == k
        assert scorer.fruits_sliced == k

    def test_event_fields(self, scorer):
        scorer.apply_fruit_hit(0, "apple")
        event = scorer.apply_fruit_hit(1, "kiwi")
        assert event.points == 20
        assert event.combo == 2
        assert event.kind_name == "kiwi"
        assert not event.is_hazard


class TestHazard:
    """Test hazard slices."""

    def test_hazard_costs_life(self, scorer, config):
        scorer.apply_fruit_hit(0, "apple")
        scorer.apply_fruit_hit(1, "apple")
        score_before = scorer.score

        event = scorer.apply_hazard_hit(2, "bomb")

        assert event.is_hazard
        assert event.points == 0
        assert scorer.lives == config.session.starting_lives - 1
        assert scorer.combo == 0
        assert scorer.max_combo == 2
        assert scorer.score == score_before

    def test_lives_never_negative(self, scorer, config):
        for uid in range(config.session.starting_lives + 2):
            scorer.apply_hazard_hit(uid, "bomb")
        assert scorer.lives == 0
        assert scorer.out_of_lives

    def test_combo_restarts_after_hazard(self, scorer):
        scorer.apply_fruit_hit(0, "apple")
        scorer.apply_hazard_hit(1, "bomb")
        event = scorer.apply_fruit_hit(2, "apple")
        assert event.points == 10
        assert scorer.max_combo == 1


class TestReset:
    """Test combo decay and session reset."""

    def test_reset_combo_keeps_score(self, scorer):
        scorer.apply_fruit_hit(0, "apple")
        scorer.apply_fruit_hit(1, "apple")
        scorer.reset_combo()
        assert scorer.combo == 0
        assert scorer.score == 30
        assert scorer.max_combo == 2

    def test_reset(self, scorer, config):
        scorer.apply_fruit_hit(0, "apple")
        scorer.apply_hazard_hit(1, "bomb")
        scorer.reset()
        assert scorer.score == 0
        assert scorer.combo == 0
        assert scorer.max_combo == 0
        assert scorer.fruits_sliced == 0
        assert scorer.lives == config.session.starting_lives
