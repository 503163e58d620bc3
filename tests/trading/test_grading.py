"""Tests for performance grading."""

import pytest

from orderflow_app.trading.grading import GRADE_THRESHOLDS, MIN_TRADES_FOR_GRADE, grade
from orderflow_app.trading.models import Grade

GRADE_ORDER = [Grade.F, Grade.D, Grade.C, Grade.B, Grade.A, Grade.A_STAR]


class TestGrade:
    """Test the win-rate to letter mapping."""

    @pytest.mark.parametrize("trade_count", [0, 1, 5, 9])
    @pytest.mark.parametrize("win_rate", [0.0, 50.0, 100.0])
    def test_not_available_below_minimum(self, trade_count, win_rate):
        assert grade(win_rate, trade_count) is Grade.NOT_AVAILABLE

    @pytest.mark.parametrize("win_rate,expected", [
        (100.0, Grade.A_STAR),
        (75.0, Grade.A_STAR),
        (74.9, Grade.A),
        (65.0, Grade.A),
        (64.9, Grade.B),
        (55.0, Grade.B),
        (54.9, Grade.C),
        (45.0, Grade.C),
        (44.9, Grade.D),
        (35.0, Grade.D),
        (34.9, Grade.F),
        (0.0, Grade.F),
    ])
    def test_inclusive_thresholds(self, win_rate, expected):
        assert grade(win_rate, MIN_TRADES_FOR_GRADE) is expected

    @pytest.mark.parametrize("trade_count", [10, 11, 50])
    def test_monotonic_in_win_rate(self, trade_count):
        ranks = [GRADE_ORDER.index(grade(w / 10, trade_count)) for w in range(0, 1001)]
        assert ranks == sorted(ranks)

    def test_custom_minimum(self):
        assert grade(80.0, 3, min_trades=3) is Grade.A_STAR
        assert grade(80.0, 2, min_trades=3) is Grade.NOT_AVAILABLE

    def test_thresholds_descending(self):
        bounds = [threshold for threshold, _ in GRADE_THRESHOLDS]
        assert bounds == sorted(bounds, reverse=True)
